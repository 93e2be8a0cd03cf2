import logging

import stripe

import errors
import storage
from config import settings
from models import Booking
from services.dispatch import notify_payment_confirmed

logger = logging.getLogger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY

# requires_capture covers manual-capture intents that are authorised
SUCCESS_STATUSES = {"succeeded", "requires_capture"}


def create_intent(booking_id: int) -> dict:
    booking = storage.get_booking(booking_id)
    if booking.payment_status != "pending":
        raise errors.PaymentStateError(f"Booking is already {booking.payment_status}")

    try:
        intent = stripe.PaymentIntent.create(
            amount=booking.total_amount,
            currency=settings.CURRENCY,
            automatic_payment_methods={"enabled": True},
            metadata={"booking_id": str(booking.id)},
        )
    except stripe.StripeError as e:
        logger.error("Stripe rejected payment intent for booking %s: %s", booking.id, e)
        raise errors.ProviderError(f"Error creating payment intent: {e.user_message or e}") from e

    logger.info("Payment intent %s created for booking %s", intent.id, booking.id)
    return {"clientSecret": intent.client_secret, "paymentIntentId": intent.id}


def intent_booking_id(intent):
    try:
        return intent.metadata["booking_id"]
    except (KeyError, TypeError):
        return None


async def confirm_payment(booking_id: int, payment_intent_id: str) -> Booking:
    storage.get_booking(booking_id)

    try:
        intent = stripe.PaymentIntent.retrieve(payment_intent_id)
    except stripe.InvalidRequestError as e:
        logger.warning("Unknown payment intent %s for booking %s: %s", payment_intent_id, booking_id, e)
        raise errors.ValidationError("Payment intent not found") from e
    except stripe.StripeError as e:
        logger.error("Could not retrieve payment intent %s: %s", payment_intent_id, e)
        raise errors.ProviderError(f"Error confirming payment: {e.user_message or e}") from e

    if intent_booking_id(intent) != str(booking_id):
        logger.warning("Payment intent %s does not belong to booking %s", payment_intent_id, booking_id)
        raise errors.ValidationError("Payment intent does not match booking")

    if intent.status not in SUCCESS_STATUSES:
        storage.update_payment_status(booking_id, payment_intent_id, "failed")
        logger.info("Booking %s payment failed with status %s", booking_id, intent.status)
        raise errors.PaymentFailedError(intent.status)

    booking = storage.update_payment_status(booking_id, payment_intent_id, "completed")
    await notify_payment_confirmed(booking)
    return booking
