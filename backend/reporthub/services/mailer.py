import logging
from typing import List, Optional

import requests

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

OTP_EMAIL_HTML = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #333; text-align: center;">Report Hub</h1>
  <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <h2 style="color: #495057;">Your Login Code</h2>
    <p style="font-size: 16px; color: #6c757d;">Use this 6-digit code to sign in to your account:</p>
    <div style="text-align: center; margin: 30px 0;">
      <span style="font-size: 32px; font-weight: bold; color: #007bff; letter-spacing: 5px;">{otp}</span>
    </div>
    <p style="font-size: 14px; color: #6c757d;">
      This code will expire in {minutes} minutes. If you didn't request this code, please ignore this email.
    </p>
  </div>
</div>
"""


class MailerError(Exception):
    pass


class Mailer:
    def __init__(self, api_key: Optional[str], sender: str, timeout: float = 10):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def send(self, to: List[str], subject: str, html: str) -> str:
        if not self.api_key:
            raise MailerError("RESEND_API_KEY is not configured")

        payload = {"from": self.sender, "to": to, "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            resp = requests.post(RESEND_URL, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.exception("Email send failed to=%s: %s", to, e)
            raise MailerError("Failed to send email") from e

        message_id = resp.json().get("id", "")
        logger.info("Email sent to=%s id=%s", to, message_id)
        return message_id

    def send_otp(self, email: str, otp: str, minutes: int) -> str:
        return self.send(
            [email],
            "Your Login OTP - Report Hub",
            OTP_EMAIL_HTML.format(otp=otp, minutes=minutes),
        )
