"""Application-wide collaborators, created at startup and closed at shutdown.

Handlers receive the context through ``Depends(get_context)`` instead of
reaching for module globals.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.engine import Engine
from sqlmodel import Session

from reporthub.config import Settings
from reporthub.db.session import create_tables, get_engine, get_session
from reporthub.models.user import User
from reporthub.services.generator import ReportGenerator
from reporthub.services.mailer import Mailer
from reporthub.services.otp import OTPService
from reporthub.services.pricing import PriceEngine
from reporthub.services.tracker import TrackerRegistry
from reporthub.services.validation import Validator
from reporthub.services.workflow import FulfilmentNotifier

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    pricing: PriceEngine
    validator: Validator
    generator: ReportGenerator
    otp: OTPService
    notifier: FulfilmentNotifier
    tracker: TrackerRegistry

    @classmethod
    def create(
        cls,
        settings: Settings,
        llm_client: Optional[object] = None,
        mailer: Optional[Mailer] = None,
        notifier: Optional[FulfilmentNotifier] = None,
    ) -> "AppContext":
        engine = get_engine(settings.database_url, echo=settings.sql_echo)
        create_tables(engine)
        os.makedirs(settings.storage_dir, exist_ok=True)

        mailer = mailer or Mailer(settings.resend_api_key, settings.mail_from)
        ctx = cls(
            settings=settings,
            engine=engine,
            pricing=PriceEngine(),
            validator=Validator(),
            generator=ReportGenerator(
                storage_dir=settings.storage_dir,
                public_base_url=settings.public_base_url,
                client=llm_client,
                api_key=settings.openai_api_key,
                model=settings.openai_model,
            ),
            otp=OTPService(
                mailer,
                app_origin=settings.app_origin,
                ttl_minutes=settings.otp_ttl_minutes,
                session_ttl_hours=settings.session_ttl_hours,
            ),
            notifier=notifier or FulfilmentNotifier(settings.fulfilment_webhook_url),
            tracker=TrackerRegistry(
                tick_seconds=settings.tracking_tick_seconds,
                idle_ticks=settings.tracking_idle_ticks,
            ),
        )
        logger.info("Application context ready db=%s", engine.url.render_as_string(hide_password=True))
        return ctx

    def session(self) -> Session:
        return get_session(self.engine)

    def close(self) -> None:
        self.tracker.shutdown()
        self.engine.dispose()
        logger.info("Application context closed")


def get_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "context", None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return ctx


def current_user(
    authorization: Optional[str] = Header(default=None),
    ctx: AppContext = Depends(get_context),
) -> User:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    token = authorization.split(" ", 1)[1].strip()
    session = ctx.session()
    try:
        user = ctx.otp.authenticate(session, token)
        if user is None:
            raise HTTPException(status_code=401, detail="Invalid or expired session")
        session.expunge(user)
        return user
    finally:
        session.close()
