import logging

from twilio.rest import Client

from config import settings
from schemas import to_e164
from services.notification import NotificationResult

logger = logging.getLogger(__name__)


def send_sms(to: str, message: str) -> NotificationResult:
    if not settings.sms_enabled:
        logger.warning("Twilio credentials not configured, skipping SMS to %s", to)
        return NotificationResult(ok=False, error="SMS not configured")

    try:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        sent = client.messages.create(
            body=message,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=to,
        )
    except Exception as e:
        logger.error("Twilio SMS to %s failed: %s", to, e)
        return NotificationResult(ok=False, error=str(e))

    logger.info("SMS sent to %s, sid %s", to, sent.sid)
    return NotificationResult(ok=True)


def render_confirmation_sms(booking) -> str:
    first_choice = booking.time_preferences[0]
    return (
        f"Hi {booking.first_name}, thanks for booking your introduction session with "
        f"{settings.STUDIO_NAME}! Payment received. Your first preference is {first_choice}; "
        f"we'll contact you within 24 hours to confirm your class time. Ref #{booking.id}"
    )


def send_confirmation_sms(booking) -> NotificationResult:
    return send_sms(to_e164(booking.phone_number), render_confirmation_sms(booking))
