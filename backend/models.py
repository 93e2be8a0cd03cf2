from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, JSON
from sqlalchemy.sql import func

from database import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=False)
    email = Column(String, nullable=False)
    emergency_contact_name = Column(String)
    emergency_contact_phone = Column(String)

    # priority order, first entry is the most preferred slot
    time_preferences = Column(JSON, nullable=False)
    class_type = Column(String, nullable=False, default="mat")
    language = Column(String, nullable=False, default="english")
    selected_date = Column(Date)

    pain_areas = Column(JSON, nullable=False, default=list)
    is_pregnant = Column(Boolean, nullable=False, default=False)
    pregnancy_weeks = Column(Integer)
    heart_condition = Column(Boolean, nullable=False, default=False)
    chest_pain = Column(Boolean, nullable=False, default=False)
    dizziness = Column(Boolean, nullable=False, default=False)
    asthma_attack = Column(Boolean, nullable=False, default=False)
    diabetes_control = Column(Boolean, nullable=False, default=False)
    other_conditions = Column(Boolean, nullable=False, default=False)
    medical_conditions = Column(Text)
    has_medical_conditions = Column(Boolean, nullable=False, default=False)

    total_amount = Column(Integer, nullable=False)  # cents
    stripe_payment_intent_id = Column(String)
    payment_status = Column(String, nullable=False, default="pending")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
