"""
Transactional emails: ticket delivery after registration, welcome mail after
sign-up. Failures never propagate; they come back as an EmailResult so the
triggering request can still succeed and report what happened.
"""

from html import escape

from evntos.core.config import Settings
from evntos.core.logging import get_logger
from evntos.core.metrics import record_email
from evntos.infrastructure.mailer import (
    Attachment,
    EmailDeliveryError,
    EmailNotConfiguredError,
    ResendMailer,
)
from evntos.models.event import Event
from evntos.models.registration import Registration
from evntos.models.user import User
from evntos.schemas.registration import EmailResult
from evntos.services.ticket_service import render_ticket_pdf, ticket_filename

logger = get_logger(__name__)

TICKET_EMAIL_HTML = """
<h1>Hello {name},</h1>
<p>Thank you for registering for <strong>{title}</strong>!</p>
<p>Your PDF ticket is attached to this email. Please bring it with you (either printed or on your device) for entry to the event.</p>
<p>We look forward to seeing you there!</p>
<br/>
<p>Best regards,</p>
<p>The Evntos Team</p>
"""

WELCOME_EMAIL_HTML = """
<div style="font-family: Arial, sans-serif; line-height: 1.6;">
  <h1 style="color: #F97316;">Welcome to Evntos, {name}!</h1>
  <p>Thank you for signing up. We're excited to have you on board.</p>
  <p>With Evntos, you can easily create, promote, and manage your events. Get ready to make your next event a stunning success!</p>
  <p>To get started, please visit your dashboard:</p>
  <p><a href="{base_url}/dashboard" style="background-color: #F97316; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; display: inline-block;">Go to Dashboard</a></p>
  <br/>
  <p>If you have any questions, feel free to explore our <a href="{base_url}/#faq">FAQ section</a> or contact our support team.</p>
  <br/>
  <p>Best regards,</p>
  <p><strong>The Evntos Team</strong></p>
</div>
"""


async def send_ticket_email(
    mailer: ResendMailer,
    settings: Settings,
    event: Event,
    registration: Registration,
) -> EmailResult:
    """Render the PDF ticket and mail it to the guest."""
    try:
        pdf = render_ticket_pdf(event, registration)
        email_id = await mailer.send(
            sender=settings.TICKET_FROM_EMAIL,
            to=[registration.email],
            subject=f"Your Ticket for {event.title}",
            html=TICKET_EMAIL_HTML.format(name=escape(registration.name), title=escape(event.title)),
            attachments=[Attachment(ticket_filename(event, registration), pdf)],
        )
    except EmailNotConfiguredError:
        logger.error("ticket_email_not_configured", registration_id=registration.id)
        record_email("ticket", success=False)
        return EmailResult(success=False, message="Email sending is not configured on the server.")
    except EmailDeliveryError as e:
        logger.error("ticket_email_failed", registration_id=registration.id, error=str(e))
        record_email("ticket", success=False)
        return EmailResult(
            success=False,
            message=f"Failed to send email. Reason: {e} Please check server logs for complete details.",
        )

    record_email("ticket", success=True)
    logger.info("ticket_email_sent", registration_id=registration.id, email_id=email_id)
    return EmailResult(success=True, message="Ticket email sent successfully.", email_id=email_id or None)


async def send_welcome_email(mailer: ResendMailer, settings: Settings, user: User) -> EmailResult:
    name = user.username or "New User"
    try:
        email_id = await mailer.send(
            sender=settings.WELCOME_FROM_EMAIL,
            to=[user.email],
            subject="Welcome to Evntos!",
            html=WELCOME_EMAIL_HTML.format(
                name=escape(name),
                base_url=settings.APP_BASE_URL.rstrip("/"),
            ),
        )
    except EmailNotConfiguredError:
        logger.warning("welcome_email_not_configured", user_id=user.id)
        record_email("welcome", success=False)
        return EmailResult(success=False, message="Email sending (welcome) is not configured on the server.")
    except EmailDeliveryError as e:
        logger.error("welcome_email_failed", user_id=user.id, error=str(e))
        record_email("welcome", success=False)
        return EmailResult(success=False, message=f"Failed to send welcome email. Reason: {e}")

    record_email("welcome", success=True)
    logger.info("welcome_email_sent", user_id=user.id, email_id=email_id)
    return EmailResult(success=True, message="Welcome email sent successfully.", email_id=email_id or None)
