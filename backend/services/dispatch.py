import logging
from typing import Dict

from starlette.concurrency import run_in_threadpool

from schemas import needs_medical_clearance
from services.email_service import (
    send_admin_notification,
    send_confirmation_email,
    send_medical_clearance_email,
)
from services.notification import NotificationResult
from services.sms_service import send_confirmation_sms

logger = logging.getLogger(__name__)


async def notify_payment_confirmed(booking) -> Dict[str, NotificationResult]:
    """Best-effort notifications for a paid booking. Never raises."""
    results = {
        "confirmation_email": await send_confirmation_email(booking),
        "confirmation_sms": await run_in_threadpool(send_confirmation_sms, booking),
        "admin_email": await send_admin_notification(booking),
    }
    if needs_medical_clearance(booking):
        results["medical_clearance_email"] = await send_medical_clearance_email(booking)

    for name, result in results.items():
        if not result.ok:
            logger.warning("Booking %s: %s not sent (%s)", booking.id, name, result.error)
    return results
