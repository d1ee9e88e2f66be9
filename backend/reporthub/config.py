"""Report Hub configuration, read from the environment and an optional .env file."""
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./reporthub.db"
    sql_echo: bool = False

    # text generation
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"

    # OTP mail (Resend HTTP API)
    resend_api_key: Optional[str] = None
    mail_from: str = "Report Hub <onboarding@resend.dev>"
    otp_ttl_minutes: int = 10
    session_ttl_hours: int = 24 * 7

    # where the browser app lives, used for sign-in links
    app_origin: str = "http://localhost:3000"
    public_base_url: str = "http://localhost:8000"
    storage_dir: str = "./storage/reports"

    fulfilment_webhook_url: Optional[str] = None
    workflow_secret: Optional[str] = None

    tracking_tick_seconds: float = 30.0
    # 0 keeps unread tracking sessions running until the order leaves out_for_delivery
    tracking_idle_ticks: int = 3

    # JSON list in the environment, e.g. CORS_ORIGINS='["https://app.example"]'
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:80"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}
