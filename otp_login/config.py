from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: Literal["dev", "prod", "test"] = "prod"
    DEBUG: bool = False

    # App
    APP_NAME: str = "otp-login"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 3000

    # Mail account (Gmail app password by default)
    EMAIL_USER: str | None = None
    EMAIL_PASS: str | None = None
    EMAIL_FROM: str | None = None     # falls back to EMAIL_USER
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USE_SSL: bool = True         # False -> plain SMTP + STARTTLS
    EMAIL_PROBE_TIMEOUT_SEC: float = 5.0
    EMAIL_SEND_TIMEOUT_SEC: float = 10.0

    # OTP
    OTP_TTL_SECONDS: int = 5 * 60

    # Logging / Observability
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True
    REQUEST_ID_HEADER: str = "X-Request-ID"

    ALLOWED_ORIGINS: str = "*"

    @property
    def email_configured(self) -> bool:
        return bool(self.EMAIL_USER)

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
