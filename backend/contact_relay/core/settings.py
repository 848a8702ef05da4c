# contact_relay/core/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    api_title: str = Field(default="Contact Relay API", alias="API_TITLE")

    # "development" exposes transport error detail in 500 responses
    app_env: str = Field(default="production", alias="APP_ENV")

    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    # True -> implicit TLS (port 465 style); False -> STARTTLS when offered
    smtp_secure: bool = Field(default=False, alias="SMTP_SECURE")
    smtp_timeout: float = Field(default=30.0, alias="SMTP_TIMEOUT")

    email_user: Optional[str] = Field(default=None, alias="EMAIL_USER")
    email_password: Optional[str] = Field(default=None, alias="EMAIL_PASSWORD")
    # Falls back to EMAIL_USER when unset
    email_to: Optional[str] = Field(default=None, alias="EMAIL_TO")

    mail_from_name: str = Field(default="Сайт-визитка", alias="MAIL_FROM_NAME")
    mail_subject_prefix: str = Field(default="🎯 Новая заявка: ", alias="MAIL_SUBJECT_PREFIX")

    # Mail provider: "smtp" or "fake" (records mail in memory, no network)
    mail_provider: str = Field(default="smtp", alias="MAIL_PROVIDER")

    # Language of user-facing response messages: "ru" or "en"
    contact_locale: str = Field(default="ru", alias="CONTACT_LOCALE")

    @property
    def mail_configured(self) -> bool:
        return bool(self.email_user and self.email_password)

    @property
    def recipient(self) -> Optional[str]:
        return self.email_to or self.email_user

    @property
    def expose_errors(self) -> bool:
        return self.app_env.strip().lower() == "development"

settings = Settings()
