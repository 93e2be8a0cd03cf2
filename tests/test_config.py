import pytest
from pydantic import ValidationError

from config import Settings


def test_missing_stripe_key_fails_startup(monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)

    with pytest.raises(ValidationError) as exc:
        Settings(_env_file=None)
    assert "STRIPE_SECRET_KEY" in str(exc.value)


def test_optional_providers_default_off(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_dummy")
    for name in ("MAIL_USERNAME", "MAIL_PASSWORD", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)
    assert settings.email_enabled is False
    assert settings.sms_enabled is False
    assert settings.CURRENCY == "aud"
