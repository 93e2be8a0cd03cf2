import logging
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# ================== SETTINGS ==================
class Settings(BaseSettings):
    STRIPE_SECRET_KEY: str
    CURRENCY: str = "aud"

    DATABASE_URL: str = "sqlite:///./bookings.db"

    # Brevo SMTP relay; the password is the Brevo SMTP key
    MAIL_USERNAME: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: str = "hello@pirouettepilates.com.au"
    MAIL_FROM_NAME: str = "Pirouette Pilates"
    MAIL_SERVER: str = "smtp-relay.brevo.com"
    MAIL_PORT: int = 587
    ADMIN_EMAIL: Optional[str] = None

    ADMIN_USER: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None

    CORS_ORIGINS: List[str] = ["*"]
    STUDIO_NAME: str = "Pirouette Pilates"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow"
    )

    @property
    def email_enabled(self) -> bool:
        return bool(self.MAIL_USERNAME and self.MAIL_PASSWORD)

    @property
    def sms_enabled(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_PHONE_NUMBER)


# raises without STRIPE_SECRET_KEY
settings = Settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
