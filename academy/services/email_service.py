"""Email service for transactional emails (Resend).

Sending to arbitrary recipients requires a verified domain at
resend.com/domains and EMAIL_FROM set to an address at that domain.
"""

import logging
from decimal import Decimal
from html import escape

import anyio

from academy.config import settings

logger = logging.getLogger(__name__)


def _should_skip_email(to_email: str) -> bool:
    """Skip sending in test env or to test domains (Resend sandbox restricts recipients)."""
    if settings.ENVIRONMENT == "test":
        return True
    test_domains = ("@test.com", "@test.example.com", "@resend.dev", "@example.com")
    return any(to_email.lower().endswith(d) for d in test_domains)


def _send(to_email: str, subject: str, html: str, text: str) -> None:
    import resend

    resend.api_key = settings.RESEND_API_KEY
    resend.Emails.send(
        {
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html,
            "text": text,
        }
    )


def send_student_credentials(to_email: str, full_name: str, password: str, login_url: str) -> bool:
    """
    Send login details to a newly provisioned student.
    The account is flagged must_reset_password, so the student picks a new
    password on first login.
    Returns True if sent (or deliberately skipped in test env), False if not configured.
    Provider errors propagate to the caller.
    """
    if not settings.RESEND_API_KEY:
        logger.info("Email skipped (RESEND_API_KEY not set): student credentials to %s", to_email)
        return False
    if _should_skip_email(to_email):
        logger.info("Email skipped (test env or test domain): student credentials to %s", to_email)
        return True

    name = escape(full_name or "there")
    html = f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Your student account</title></head>
<body style="font-family: sans-serif; line-height: 1.6; color: #333; max-width: 560px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #10b981;">Welcome, {name}!</h2>
  <p>Your enrollment payment has been approved and your student account is ready.</p>
  <p>Email: <strong>{escape(to_email)}</strong><br>
     Temporary password: <code style="background: #f1f5f9; padding: 4px 8px; border-radius: 4px;">{escape(password)}</code></p>
  <p style="margin: 24px 0;">
    <a href="{escape(login_url)}" style="background: #10b981; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">Log in</a>
  </p>
  <p style="color: #666; font-size: 14px;">You will be asked to set a new password the first time you log in.</p>
</body>
</html>
"""
    text = (
        f"Welcome, {full_name or 'there'}!\n\n"
        "Your enrollment payment has been approved and your student account is ready.\n"
        f"Email: {to_email}\nTemporary password: {password}\n"
        f"Log in: {login_url}\n\n"
        "You will be asked to set a new password the first time you log in.\n"
    )
    _send(to_email, "Your student account is ready", html, text)
    logger.info("Student credentials email sent to %s", to_email)
    return True


def send_enrollment_payment_link(
    to_email: str, student_name: str, amount: Decimal, currency: str, payment_url: str
) -> bool:
    """Send the enrollment fee link to a trial-request contact. Same return contract as above."""
    if not settings.RESEND_API_KEY:
        logger.info("Email skipped (RESEND_API_KEY not set): enrollment link to %s", to_email)
        return False
    if _should_skip_email(to_email):
        logger.info("Email skipped (test env or test domain): enrollment link to %s", to_email)
        return True

    html = f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Complete your enrollment</title></head>
<body style="font-family: sans-serif; line-height: 1.6; color: #333; max-width: 560px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #4f46e5;">Complete your enrollment</h2>
  <p>Hi {escape(student_name)},</p>
  <p>Your enrollment fee is <strong>{amount} {escape(currency)}</strong>. Upload your payment proof using the link below.</p>
  <p style="margin: 24px 0;">
    <a href="{escape(payment_url)}" style="background: #4f46e5; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">Upload payment proof</a>
  </p>
  <p style="color: #666; font-size: 14px;">This link expires in {settings.ENROLLMENT_LINK_TTL_HOURS} hours.</p>
</body>
</html>
"""
    text = (
        f"Hi {student_name},\n\n"
        f"Your enrollment fee is {amount} {currency}. Upload your payment proof here:\n"
        f"{payment_url}\n\nThis link expires in {settings.ENROLLMENT_LINK_TTL_HOURS} hours.\n"
    )
    _send(to_email, "Complete your enrollment", html, text)
    logger.info("Enrollment payment link sent to %s", to_email)
    return True


class EmailNotifier:
    """Awaitable front for the blocking Resend calls above."""

    async def send_student_credentials(
        self, to_email: str, full_name: str, password: str, login_url: str
    ) -> bool:
        return await anyio.to_thread.run_sync(
            lambda: send_student_credentials(to_email, full_name, password, login_url)
        )

    async def send_enrollment_payment_link(
        self, to_email: str, student_name: str, amount: Decimal, currency: str, payment_url: str
    ) -> bool:
        return await anyio.to_thread.run_sync(
            lambda: send_enrollment_payment_link(to_email, student_name, amount, currency, payment_url)
        )
