import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv
from fastapi import Request

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _default_database_url() -> str:
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    host = os.getenv("POSTGRES_HOST", "localhost")  # In Docker, this will be 'postgres'
    port = os.getenv("POSTGRES_PORT", "5432")
    name = os.getenv("POSTGRES_DB", "storefront")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


@dataclass(frozen=True)
class Settings:
    database_url: str = field(default_factory=_default_database_url)
    db_echo: bool = False

    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    razorpay_timeout_seconds: float = 10.0
    currency: str = "INR"

    service_name: str = "storefront"
    log_level: str = "INFO"
    metrics_enabled: bool = True
    otlp_endpoint: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL") or _default_database_url(),
            db_echo=_env_flag("DB_ECHO", False),
            razorpay_key_id=os.getenv("RAZORPAY_KEY_ID", ""),
            razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
            razorpay_base_url=os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1"),
            razorpay_timeout_seconds=float(os.getenv("RAZORPAY_TIMEOUT_SECONDS", "10")),
            currency=os.getenv("CURRENCY", "INR"),
            service_name=os.getenv("SERVICE_NAME", "storefront"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            metrics_enabled=_env_flag("METRICS_ENABLED", True),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT") or None,
        )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
