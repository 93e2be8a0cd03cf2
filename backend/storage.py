import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

import errors
from database import SessionLocal
from models import Booking
from offers import price_for
from schemas import BookingCreate, has_medical_concern

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("completed", "failed")


def create_booking(data: BookingCreate) -> Booking:
    booking = Booking(
        **data.model_dump(),
        total_amount=price_for(data.class_type),
        payment_status="pending",
    )
    booking.has_medical_conditions = has_medical_concern(data)

    db = SessionLocal()
    try:
        db.add(booking)
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to store booking for %s: %s", data.email, e)
        raise errors.PersistenceError("Could not save booking") from e
    finally:
        db.close()

    logger.info("Created booking %s (%s, %s cents)", booking.id, booking.class_type, booking.total_amount)
    return booking


def get_booking(booking_id: int) -> Booking:
    db = SessionLocal()
    try:
        booking = db.get(Booking, booking_id)
    except SQLAlchemyError as e:
        raise errors.PersistenceError("Could not load booking") from e
    finally:
        db.close()

    if not booking:
        raise errors.NotFoundError("Booking not found")
    return booking


def update_payment_status(booking_id: int, payment_intent_id: str, status: str) -> Booking:
    """
    Record the payment outcome. Only pending -> completed / failed is allowed;
    writing the status a booking already has is a no-op in effect.
    """
    db = SessionLocal()
    try:
        booking = db.get(Booking, booking_id)
        if not booking:
            raise errors.NotFoundError("Booking not found")

        if booking.payment_status in TERMINAL_STATUSES and booking.payment_status != status:
            raise errors.PaymentStateError(
                f"Booking {booking_id} is already {booking.payment_status}"
            )

        booking.stripe_payment_intent_id = payment_intent_id
        booking.payment_status = status
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to update payment for booking %s: %s", booking_id, e)
        raise errors.PersistenceError("Could not update booking") from e
    finally:
        db.close()

    logger.info("Booking %s payment %s (intent %s)", booking_id, status, payment_intent_id)
    return booking


def list_bookings() -> List[Booking]:
    db = SessionLocal()
    try:
        return db.query(Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    except SQLAlchemyError as e:
        raise errors.PersistenceError("Could not load bookings") from e
    finally:
        db.close()
