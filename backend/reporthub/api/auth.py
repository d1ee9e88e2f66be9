import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from reporthub.context import AppContext, get_context
from reporthub.models.user import SendOTPRequest, VerifyOTPRequest
from reporthub.services.mailer import MailerError
from reporthub.services.otp import OTPError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/send-otp")
async def send_otp(req: SendOTPRequest, ctx: AppContext = Depends(get_context)):
    if not req.email or "@" not in req.email:
        raise HTTPException(status_code=400, detail="Email is required")

    session = ctx.session()
    try:
        return ctx.otp.send(session, req.email)
    except MailerError:
        raise HTTPException(status_code=500, detail="Failed to send OTP email")
    finally:
        session.close()


@router.post("/verify-otp")
async def verify_otp(req: VerifyOTPRequest, ctx: AppContext = Depends(get_context)):
    if not req.email or not req.otp:
        raise HTTPException(status_code=400, detail="Email and OTP are required")

    session = ctx.session()
    try:
        return ctx.otp.verify(session, req.email, req.otp, req.full_name)
    except OTPError as e:
        raise HTTPException(status_code=400, detail=str(e))
    finally:
        session.close()


@router.post("/logout")
async def logout(authorization: Optional[str] = Header(default=None), ctx: AppContext = Depends(get_context)):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    session = ctx.session()
    try:
        ended = ctx.otp.logout(session, authorization.split(" ", 1)[1].strip())
    finally:
        session.close()
    return {"ok": ended}
