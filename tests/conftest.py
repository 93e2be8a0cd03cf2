import os
import sys
from types import SimpleNamespace

import pytest

# --- required settings, before anything imports config ---
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ["DATABASE_URL"] = "sqlite://"

# --- path to backend ---
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
BACKEND_DIR = os.path.join(BASE_DIR, "backend")
sys.path.insert(0, BACKEND_DIR)

import stripe  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from config import settings  # noqa: E402
from database import Base  # noqa: E402
from main import app  # noqa: E402

# ------------------ engine ------------------
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(bind=engine)
Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def override_db(monkeypatch):
    monkeypatch.setattr("storage.SessionLocal", TestingSessionLocal)
    yield
    # clean tables after each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def no_providers(monkeypatch):
    """Mail, SMS and admin access start unconfigured regardless of a local .env."""
    for name in (
        "MAIL_USERNAME",
        "MAIL_PASSWORD",
        "ADMIN_EMAIL",
        "ADMIN_USER",
        "ADMIN_PASSWORD",
        "TWILIO_ACCOUNT_SID",
        "TWILIO_AUTH_TOKEN",
        "TWILIO_PHONE_NUMBER",
    ):
        monkeypatch.setattr(settings, name, None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def valid_booking():
    return {
        "firstName": "Jane",
        "lastName": "Citizen",
        "phoneNumber": "0412345678",
        "email": "jane@example.com",
        "emergencyContactName": "John Citizen",
        "emergencyContactPhone": "0298765432",
        "timePreferences": ["7.00 am"],
        "classType": "mat",
        "language": "english",
        "painAreas": [],
        "isPregnant": False,
        "heartCondition": False,
        "chestPain": False,
        "dizziness": False,
        "asthmaAttack": False,
        "diabetesControl": False,
        "otherConditions": False,
    }


# ------------------ stripe ------------------
class FakePaymentIntents:
    """Stands in for stripe.PaymentIntent; intents start awaiting a payment method."""

    def __init__(self):
        self.intents = {}
        self.create_calls = []
        self.fail_with = None

    def create(self, **kwargs):
        if self.fail_with:
            raise self.fail_with
        self.create_calls.append(kwargs)
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = SimpleNamespace(
            id=intent_id,
            client_secret=f"{intent_id}_secret_abc",
            status="requires_payment_method",
            amount=kwargs["amount"],
            currency=kwargs["currency"],
            metadata=dict(kwargs.get("metadata") or {}),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve(self, intent_id):
        if self.fail_with:
            raise self.fail_with
        if intent_id not in self.intents:
            raise stripe.InvalidRequestError(f"No such payment_intent: '{intent_id}'", "id")
        return self.intents[intent_id]

    def set_status(self, intent_id, status):
        self.intents[intent_id].status = status


@pytest.fixture
def fake_stripe(monkeypatch):
    fake = FakePaymentIntents()
    monkeypatch.setattr(stripe, "PaymentIntent", fake)
    return fake


@pytest.fixture
def sent_notifications(monkeypatch):
    """Record dispatcher calls instead of talking to mail/SMS providers."""
    from services.notification import NotificationResult

    calls = []

    def recorder(name):
        async def send(booking):
            calls.append((name, booking.id))
            return NotificationResult(ok=True)
        return send

    def sms(booking):
        calls.append(("confirmation_sms", booking.id))
        return NotificationResult(ok=True)

    monkeypatch.setattr("services.dispatch.send_confirmation_email", recorder("confirmation_email"))
    monkeypatch.setattr("services.dispatch.send_admin_notification", recorder("admin_email"))
    monkeypatch.setattr("services.dispatch.send_medical_clearance_email", recorder("medical_clearance_email"))
    monkeypatch.setattr("services.dispatch.send_confirmation_sms", sms)
    return calls
