import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from schemas import STEP_SCHEMAS, format_errors

logger = logging.getLogger(__name__)

STEPS = ("time-preferences", "contact", "medical", "payment")
PAYMENT_STEP = len(STEPS) - 1

# accumulator key for each data-collecting step
STEP_KEYS = {
    "time-preferences": "timePreferences",
    "contact": "contact",
    "medical": "medical",
}


@dataclass(frozen=True)
class WizardState:
    step: int = 0
    data: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: MappingProxyType({}))
    errors: tuple = ()

    @property
    def step_name(self) -> str:
        return STEPS[self.step]

    @property
    def is_payment_step(self) -> bool:
        return self.step == PAYMENT_STEP


def advance(state: WizardState, step_data: Optional[Dict[str, Any]] = None) -> WizardState:
    """Validate the current step's data and move forward, or stay with field errors."""
    name = state.step_name
    schema = STEP_SCHEMAS.get(name)
    if schema is None:
        return replace(state, errors=())

    try:
        validated = schema.model_validate(step_data or {})
    except PydanticValidationError as exc:
        return replace(state, errors=tuple(format_errors(exc)))

    data = dict(state.data)
    data[STEP_KEYS[name]] = MappingProxyType(validated.model_dump(by_alias=True, mode="json"))
    return WizardState(
        step=min(state.step + 1, PAYMENT_STEP),
        data=MappingProxyType(data),
        errors=(),
    )


def retreat(state: WizardState) -> WizardState:
    return replace(state, step=max(state.step - 1, 0), errors=())


def merged_payload(state: WizardState) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for key in STEP_KEYS.values():
        payload.update(state.data.get(key, {}))
    return payload


class WizardError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


@dataclass(frozen=True)
class PaymentHandoff:
    """What the payment widget needs to collect the card."""
    booking: Dict[str, Any]
    client_secret: str
    payment_intent_id: str


class BookingWizard:
    def __init__(self, client: httpx.Client):
        self.client = client
        self.state = WizardState()
        self.booking: Optional[Dict[str, Any]] = None

    @property
    def step_name(self) -> str:
        return self.state.step_name

    @property
    def errors(self) -> tuple:
        return self.state.errors

    def advance(self, step_data: Optional[Dict[str, Any]] = None) -> bool:
        self.state = advance(self.state, step_data)
        return not self.state.errors

    def retreat(self) -> None:
        self.state = retreat(self.state)

    def payload(self) -> Dict[str, Any]:
        return merged_payload(self.state)

    def submit_and_pay(self) -> PaymentHandoff:
        if not self.state.is_payment_step:
            raise WizardError(f"Cannot submit from step '{self.step_name}'")

        self.booking = self._post("/api/booking", self.payload())
        intent = self._post("/api/create-payment-intent", {"bookingId": self.booking["id"]})
        logger.info("Booking %s awaiting payment (intent %s)", self.booking["id"], intent["paymentIntentId"])
        return PaymentHandoff(
            booking=self.booking,
            client_secret=intent["clientSecret"],
            payment_intent_id=intent["paymentIntentId"],
        )

    def complete_payment(self, payment_intent_id: str) -> Dict[str, Any]:
        """Called once the payment widget reports completion; the server re-checks with Stripe."""
        if self.booking is None:
            raise WizardError("No booking has been submitted")
        result = self._post(
            "/api/confirm-payment",
            {"bookingId": self.booking["id"], "paymentIntentId": payment_intent_id},
        )
        self.booking = result["booking"]
        return self.booking

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.post(path, json=body)
        except httpx.HTTPError as e:
            raise WizardError(f"Could not reach booking service: {e}") from e

        content = response.json() if response.content else {}
        if response.is_error:
            raise WizardError(
                content.get("message", response.reason_phrase),
                status_code=response.status_code,
                errors=content.get("errors"),
            )
        return content
