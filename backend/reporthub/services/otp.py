import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlmodel import Session, select

from reporthub.models.user import AuthSession, EmailOTP, User
from reporthub.services.mailer import Mailer
from reporthub.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


class OTPError(Exception):
    pass


def generate_code() -> str:
    """Six-digit numeric code, never with a leading zero."""
    return str(100000 + secrets.randbelow(900000))


class OTPService:
    """Email one-time-password login.

    Codes expire after ``ttl_minutes`` and can be used once. A verified code
    upserts the user and issues a bearer session token.
    """

    def __init__(self, mailer: Mailer, app_origin: str, ttl_minutes: int = 10, session_ttl_hours: int = 168):
        self.mailer = mailer
        self.app_origin = app_origin.rstrip("/")
        self.ttl_minutes = ttl_minutes
        self.session_ttl_hours = session_ttl_hours

    def send(self, session: Session, email: str) -> Dict[str, str]:
        email = email.strip().lower()
        code = generate_code()
        row = EmailOTP(email=email, otp=code, expires_at=utcnow() + timedelta(minutes=self.ttl_minutes))
        session.add(row)
        session.commit()

        self.mailer.send_otp(email, code, self.ttl_minutes)
        logger.info("OTP sent to %s", email)
        return {"message": "OTP sent successfully"}

    def verify(self, session: Session, email: str, otp: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        email = email.strip().lower()
        stmt = (
            select(EmailOTP)
            .where(EmailOTP.email == email)
            .where(EmailOTP.otp == otp.strip())
            .where(EmailOTP.verified == False)  # noqa: E712
            .where(EmailOTP.expires_at > utcnow())
            .order_by(EmailOTP.created_at.desc())
            .limit(1)
        )
        row = session.exec(stmt).first()
        if row is None:
            logger.warning("Invalid or expired OTP for %s", email)
            raise OTPError("Invalid or expired OTP")

        row.verified = True
        session.add(row)

        user = session.exec(select(User).where(User.email == email)).first()
        if user is None:
            user = User(email=email, full_name=full_name or email.split("@")[0])
            session.add(user)
            session.flush()
            logger.info("Created user id=%s email=%s", user.id, email)

        token = secrets.token_urlsafe(32)
        session.add(AuthSession(
            token=token,
            user_id=user.id,
            expires_at=utcnow() + timedelta(hours=self.session_ttl_hours),
        ))
        session.commit()
        session.refresh(user)

        logger.info("OTP verified for %s", email)
        return {
            "message": "OTP verified successfully",
            "user": {"id": user.id, "email": user.email, "full_name": user.full_name},
            "session_url": f"{self.app_origin}/dashboard#access_token={token}",
            "access_token": token,
        }

    def authenticate(self, session: Session, token: str) -> Optional[User]:
        auth = session.exec(select(AuthSession).where(AuthSession.token == token)).first()
        if auth is None or as_utc(auth.expires_at) <= utcnow():
            return None
        return session.get(User, auth.user_id)

    def logout(self, session: Session, token: str) -> bool:
        auth = session.exec(select(AuthSession).where(AuthSession.token == token)).first()
        if auth is None:
            return False
        session.delete(auth)
        session.commit()
        return True
