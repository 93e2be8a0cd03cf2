import logging
from html import escape

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from config import settings
from offers import OFFERS, format_amount
from schemas import needs_medical_clearance
from services.notification import NotificationResult

logger = logging.getLogger(__name__)

LANGUAGES = {"english": "English", "spanish": "Español"}


# ================== EMAIL CONFIG ==================
def get_mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
    )


async def send_email(to: str, subject: str, html_body: str) -> NotificationResult:
    if not settings.email_enabled:
        logger.warning("Mail credentials not configured, skipping email '%s' to %s", subject, to)
        return NotificationResult(ok=False, error="Email not configured")

    message = MessageSchema(
        subject=subject,
        recipients=[to],
        body=html_body,
        subtype=MessageType.html,
    )
    try:
        await FastMail(get_mail_config()).send_message(message)
    except Exception as e:
        logger.error("Failed to send email '%s' to %s: %s", subject, to, e)
        return NotificationResult(ok=False, error=str(e))

    logger.info("Email '%s' sent to %s", subject, to)
    return NotificationResult(ok=True)


# ================== TEMPLATES ==================
def render_time_preferences(booking) -> str:
    items = "".join(f"<li>{escape(slot)}</li>" for slot in booking.time_preferences)
    return f"<ol>{items}</ol>"


def render_confirmation_email(booking) -> str:
    offer = OFFERS[booking.class_type]
    return f"""
    <html>
    <body>
        <h2>Booking Confirmation - {escape(offer['name'])}</h2>
        <p>Dear {escape(booking.first_name)} {escape(booking.last_name)},</p>
        <p>Thank you for booking your introduction session with {escape(settings.STUDIO_NAME)}!
        We're excited to welcome you to our studio.</p>
        <h3>Booking Details</h3>
        <ul>
            <li><strong>Class:</strong> {escape(offer['name'])} ({offer['duration']} minutes)</li>
            <li><strong>Amount Paid:</strong> {format_amount(booking.total_amount, settings.CURRENCY)}</li>
            <li><strong>Language:</strong> {LANGUAGES.get(booking.language, booking.language)}</li>
            <li><strong>Email:</strong> {escape(booking.email)}</li>
            <li><strong>Phone:</strong> {escape(booking.phone_number)}</li>
        </ul>
        <h3>Your Time Preferences (in order of priority)</h3>
        {render_time_preferences(booking)}
        <p>We will contact you within 24 hours to confirm your exact class time based on
        your preferences and availability.</p>
        <p>What to bring:</p>
        <ul>
            <li>Comfortable workout clothing</li>
            <li>Water bottle</li>
            <li>Towel</li>
        </ul>
        <p>We look forward to seeing you at the studio!</p>
        <p>Best regards,<br>The {escape(settings.STUDIO_NAME)} Team</p>
    </body>
    </html>
    """


def render_admin_notification(booking) -> str:
    offer = OFFERS[booking.class_type]
    emergency = "–"
    if booking.emergency_contact_name or booking.emergency_contact_phone:
        emergency = f"{escape(booking.emergency_contact_name or '')} {escape(booking.emergency_contact_phone or '')}"
    clearance = "Yes" if needs_medical_clearance(booking) else "No"
    return f"""
    <html>
    <body>
        <h2>New Booking #{booking.id}</h2>
        <p>Class: {escape(offer['name'])}</p>
        <p>Name: {escape(booking.first_name)} {escape(booking.last_name)}</p>
        <p>Phone: {escape(booking.phone_number)}</p>
        <p>Email: {escape(booking.email)}</p>
        <p>Emergency contact: {emergency}</p>
        <p>Language: {LANGUAGES.get(booking.language, booking.language)}</p>
        <p>Preferred date: {booking.selected_date.strftime('%d/%m/%Y') if booking.selected_date else '–'}</p>
        <p>Time preferences:</p>
        {render_time_preferences(booking)}
        <p>Amount paid: {format_amount(booking.total_amount, settings.CURRENCY)}</p>
        <p>Payment intent: {escape(booking.stripe_payment_intent_id or '–')}</p>
        <p>Medical clearance required: {clearance}</p>
    </body>
    </html>
    """


def render_medical_clearance_email(booking) -> str:
    details = []
    if booking.pain_areas:
        details.append(f"<p><strong>Pain Areas:</strong> {escape(', '.join(booking.pain_areas))}</p>")
    if booking.is_pregnant:
        weeks = f" ({booking.pregnancy_weeks} weeks)" if booking.pregnancy_weeks else ""
        details.append(f"<p><strong>Pregnancy:</strong> Yes{weeks}</p>")
    conditions = [
        ("heart_condition", "Heart condition"),
        ("chest_pain", "Chest pain"),
        ("dizziness", "Dizziness or fainting"),
        ("asthma_attack", "Asthma attacks"),
        ("diabetes_control", "Diabetes control"),
        ("other_conditions", "Other conditions"),
    ]
    reported = [label for flag, label in conditions if getattr(booking, flag)]
    if reported:
        details.append(f"<p><strong>Reported:</strong> {', '.join(reported)}</p>")
    if booking.medical_conditions:
        details.append(f"<p><strong>Additional Information:</strong><br>{escape(booking.medical_conditions)}</p>")

    return f"""
    <html>
    <body>
        <h2>Medical Clearance Required</h2>
        <p>Dear {escape(booking.first_name)} {escape(booking.last_name)},</p>
        <p>Thank you for booking your introduction session. As you indicated some medical
        conditions on your booking form, we require clearance from your doctor before
        you can participate in classes.</p>
        <h3>What you need to do</h3>
        <ol>
            <li>Consult your doctor or healthcare provider</li>
            <li>Obtain written clearance for participating in Pilates exercises</li>
            <li>Email us the clearance document or have your doctor contact us directly</li>
        </ol>
        <h3>Medical Information Provided</h3>
        {''.join(details)}
        <p>Once we receive your clearance we will confirm your class time.</p>
        <p>Best regards,<br>The {escape(settings.STUDIO_NAME)} Team</p>
    </body>
    </html>
    """


# ================== DISPATCHERS ==================
async def send_confirmation_email(booking) -> NotificationResult:
    return await send_email(
        booking.email,
        f"Booking Confirmation - {settings.STUDIO_NAME}",
        render_confirmation_email(booking),
    )


async def send_admin_notification(booking) -> NotificationResult:
    return await send_email(
        settings.ADMIN_EMAIL or settings.MAIL_FROM,
        f"New booking #{booking.id}: {booking.first_name} {booking.last_name}",
        render_admin_notification(booking),
    )


async def send_medical_clearance_email(booking) -> NotificationResult:
    return await send_email(
        booking.email,
        f"Medical Clearance Required - {settings.STUDIO_NAME}",
        render_medical_clearance_email(booking),
    )
