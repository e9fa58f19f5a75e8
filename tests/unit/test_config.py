"""Unit tests for AppSettings and sub-configs."""

import pytest

from config import AppSettings, OtpSettings, RedisSettings, SmsSettings


class TestRedisSettings:
    def test_redis_uri_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_redis_uri_loaded(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")
        assert RedisSettings().redis_uri == "redis://localhost:6379"

    def test_default_prefix(self, monkeypatch):
        monkeypatch.delenv("REDIS_KEY_PREFIX", raising=False)
        assert RedisSettings().redis_key_prefix == "otp"


class TestOtpSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "OTP_TTL_SECONDS",
            "OTP_MAX_ATTEMPTS",
            "OTP_RATE_WINDOW_SECONDS",
            "OTP_MAX_GENERATIONS",
            "OTP_DEMO_ACCOUNTS",
            "OTP_TEST_IDENTITY_DOMAIN",
            "OTP_TEST_FAILING_CODE",
        ):
            monkeypatch.delenv(var, raising=False)
        s = OtpSettings()
        assert s.otp_ttl_seconds == 180
        assert s.otp_max_attempts == 5
        assert s.otp_rate_window_seconds == 600
        assert s.otp_max_generations == 3
        assert s.otp_demo_accounts == []
        assert s.otp_test_identity_domain == "playwright.com"
        assert s.otp_test_failing_code == "000000"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("OTP_TTL_SECONDS", "60")
        monkeypatch.setenv("OTP_MAX_GENERATIONS", "10")
        s = OtpSettings()
        assert s.otp_ttl_seconds == 60
        assert s.otp_max_generations == 10

    def test_demo_accounts_json_list(self, monkeypatch):
        monkeypatch.setenv("OTP_DEMO_ACCOUNTS", '["demo@example.com", "other@example.com"]')
        assert OtpSettings().otp_demo_accounts == ["demo@example.com", "other@example.com"]


class TestSmsSettings:
    def test_credentials_default_empty(self, monkeypatch):
        for var in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_FROM_NUMBER"):
            monkeypatch.delenv(var, raising=False)
        s = SmsSettings()
        assert s.twilio_account_sid == ""
        assert s.twilio_auth_token == ""


class TestAppSettings:
    def test_sub_configs_populated(self):
        s = AppSettings()
        assert s.redis is not None
        assert s.email is not None
        assert s.sms is not None
        assert s.otp is not None
        assert s.logging is not None
        assert s.sentry is not None

    @pytest.mark.parametrize(
        "env, expected", [("production", True), ("development", False), ("staging", False)]
    )
    def test_is_production(self, monkeypatch, env, expected):
        monkeypatch.setenv("ENV", env)
        assert AppSettings().is_production is expected

    def test_explicit_sub_config_kept(self):
        otp = OtpSettings(otp_ttl_seconds=30)
        assert AppSettings(otp=otp).otp.otp_ttl_seconds == 30
