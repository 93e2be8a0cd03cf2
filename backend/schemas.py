import re
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Type, get_args

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

import errors

TimeSlot = Literal[
    "7.00 am", "8.00 am", "9.00 am", "10.00 am",
    "1.00 pm", "2.00 pm", "3.00 pm",
    "5.00 pm", "6.00 pm", "7.00 pm",
]
TIME_SLOTS = get_args(TimeSlot)

ClassType = Literal["mat", "reformer"]
Language = Literal["english", "spanish"]
PainArea = Literal["neck", "shoulders", "back", "hips", "knees", "ankles", "other", "none"]
PaymentStatus = Literal["pending", "completed", "failed"]

MAX_TIME_PREFERENCES = 3

# Answers that require a doctor's sign-off; pain areas alone do not
CLEARANCE_FLAGS = (
    "is_pregnant",
    "heart_condition",
    "chest_pain",
    "dizziness",
    "asthma_attack",
    "diabetes_control",
    "other_conditions",
)

# 04xx xxx xxx / 02 xxxx xxxx, or the same with the 61 country code
AU_PHONE_RE = re.compile(r"^(0[2-9]\d{8}|61[2-9]\d{8})$")


def is_australian_phone(value: str) -> bool:
    return bool(AU_PHONE_RE.match(re.sub(r"\D", "", value)))


def to_e164(phone: str) -> str:
    """Normalise an Australian number to E.164, e.g. 0412 345 678 -> +61412345678."""
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("0"):
        return "+61" + digits[1:]
    return "+" + digits


def needs_medical_clearance(record: Any) -> bool:
    return any(bool(getattr(record, flag, False)) for flag in CLEARANCE_FLAGS)


def has_medical_concern(record: Any) -> bool:
    pain_areas = getattr(record, "pain_areas", None) or []
    notes = getattr(record, "medical_conditions", None) or ""
    return (
        needs_medical_clearance(record)
        or any(area != "none" for area in pain_areas)
        or bool(notes.strip())
    )


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ================== STEP 1: TIME PREFERENCES ==================
class TimePreferencesStep(CamelModel):
    time_preferences: List[TimeSlot]
    class_type: ClassType = "mat"
    language: Language = "english"
    selected_date: Optional[date] = None

    @field_validator("time_preferences")
    @classmethod
    def check_time_preferences(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("Please select at least one time preference")
        if len(value) > MAX_TIME_PREFERENCES:
            raise ValueError(f"You can select up to {MAX_TIME_PREFERENCES} time preferences")
        if len(set(value)) != len(value):
            raise ValueError("Each time preference can only be selected once")
        return value


# ================== STEP 2: CONTACT ==================
class ContactStep(CamelModel):
    first_name: str
    last_name: str
    phone_number: str
    email: EmailStr
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def check_name(cls, value: str, info) -> str:
        value = value.strip()
        label = info.field_name.replace("_", " ").capitalize()
        if not value:
            raise ValueError(f"{label} is required")
        if len(value) > 50:
            raise ValueError(f"{label} must be less than 50 characters")
        return value

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Phone number is required")
        if not is_australian_phone(value):
            raise ValueError("Please enter a valid Australian phone number (e.g., 0412 345 678)")
        return value

    @field_validator("emergency_contact_name")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("emergency_contact_phone")
    @classmethod
    def check_emergency_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not is_australian_phone(value):
            raise ValueError("Please enter a valid Australian phone number (e.g., 0412 345 678)")
        return value


# ================== STEP 3: MEDICAL DECLARATION ==================
class MedicalStep(CamelModel):
    pain_areas: List[PainArea] = Field(default_factory=list)
    is_pregnant: bool = False
    pregnancy_weeks: Optional[int] = Field(default=None, ge=1, le=42)
    heart_condition: bool = False
    chest_pain: bool = False
    dizziness: bool = False
    asthma_attack: bool = False
    diabetes_control: bool = False
    other_conditions: bool = False
    medical_conditions: Optional[str] = None

    @field_validator("pain_areas")
    @classmethod
    def dedupe_pain_areas(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    @field_validator("pregnancy_weeks")
    @classmethod
    def weeks_only_when_pregnant(cls, value: Optional[int], info) -> Optional[int]:
        if value is not None and not info.data.get("is_pregnant"):
            raise ValueError("Weeks pregnant can only be given when pregnant")
        return value

    @field_validator("medical_conditions")
    @classmethod
    def strip_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


# ================== BOOKING ==================
class BookingCreate(TimePreferencesStep, ContactStep, MedicalStep):
    """Everything collected by steps 1-3. Amount and payment fields are server-owned."""


class BookingOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    first_name: str
    last_name: str
    phone_number: str
    email: str
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    time_preferences: List[str]
    class_type: str
    language: str
    selected_date: Optional[date] = None
    pain_areas: List[str]
    is_pregnant: bool
    pregnancy_weeks: Optional[int] = None
    heart_condition: bool
    chest_pain: bool
    dizziness: bool
    asthma_attack: bool
    diabetes_control: bool
    other_conditions: bool
    medical_conditions: Optional[str] = None
    has_medical_conditions: bool
    total_amount: int
    stripe_payment_intent_id: Optional[str] = None
    payment_status: PaymentStatus
    created_at: Optional[datetime] = None

    @computed_field(alias="needsMedicalClearance")
    @property
    def needs_medical_clearance(self) -> bool:
        return needs_medical_clearance(self)


class PaymentIntentRequest(CamelModel):
    booking_id: Optional[int] = None


class ConfirmPaymentRequest(CamelModel):
    booking_id: Optional[int] = None
    payment_intent_id: Optional[str] = None


class ConfirmPaymentResponse(CamelModel):
    success: bool
    booking: BookingOut


# ================== VALIDATION ==================
STEP_SCHEMAS: Dict[str, Type[CamelModel]] = {
    "time-preferences": TimePreferencesStep,
    "contact": ContactStep,
    "medical": MedicalStep,
}


def format_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    result = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"])
        # ValueErrors raised in our validators arrive as "Value error, <text>"
        raised = err.get("ctx", {}).get("error")
        message = str(raised) if raised is not None else err["msg"]
        result.append({"field": field, "message": message})
    return result


def validate(schema: Type[CamelModel], payload: Any) -> CamelModel:
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise errors.ValidationError("Validation failed", format_errors(exc)) from exc


def validate_step(step: str, payload: Any) -> CamelModel:
    schema = STEP_SCHEMAS.get(step)
    if schema is None:
        raise errors.NotFoundError(f"Unknown form step: {step}")
    return validate(schema, payload)
