"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional - without Redis the OTP rows live in process memory (single worker only)
    redis_uri: Optional[str] = None
    redis_key_prefix: str = "otp"


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@example.com"
    zepto_from_name: str = "passcode"


class SmsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""


class OtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_ttl_seconds: int = 180
    otp_max_attempts: int = 5
    otp_rate_window_seconds: int = 600
    otp_max_generations: int = 3

    # Accounts that sign in without a passcode (seeded demo tenants)
    otp_demo_accounts: list[str] = []

    # Non-production end-to-end identities: nothing is sent, any code but the
    # failing one verifies
    otp_test_identity_domain: str = "playwright.com"
    otp_test_failing_code: str = "000000"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "https://example.com"
    app_name: str = "passcode"

    cors_origins: list[str] = ["*"]

    # Timeout for outbound notifier calls (ZeptoMail, Twilio)
    http_timeout_seconds: float = 5.0

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    redis: Optional[RedisSettings] = None
    email: Optional[EmailSettings] = None
    sms: Optional[SmsSettings] = None
    otp: Optional[OtpSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.redis is None:
            self.redis = RedisSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.sms is None:
            self.sms = SmsSettings()
        if self.otp is None:
            self.otp = OtpSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
