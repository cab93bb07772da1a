"""
Leave notifications over SMTP (fastapi-mail).

Sending is off unless MAIL_ENABLED=true. Routes queue these coroutines on
BackgroundTasks; failures are logged and never reach the caller.
"""
import logging
import os
from typing import Iterable, Optional

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from pydantic import SecretStr

logger = logging.getLogger(__name__)

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")


def mail_enabled() -> bool:
    return os.getenv("MAIL_ENABLED", "false").lower() in ("1", "true", "yes")


def get_mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=os.getenv("MAIL_USERNAME", ""),
        MAIL_PASSWORD=SecretStr(os.getenv("MAIL_PASSWORD", "")),  # type: ignore
        MAIL_FROM=os.getenv("MAIL_FROM", "noreply@company.com"),
        MAIL_PORT=int(os.getenv("MAIL_PORT", 587)),
        MAIL_SERVER=os.getenv("MAIL_SERVER", "smtp.office365.com"),
        MAIL_STARTTLS=os.getenv("MAIL_STARTTLS", "true").lower() == "true",
        MAIL_SSL_TLS=os.getenv("MAIL_SSL_TLS", "false").lower() == "true",
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


async def send_email(to_email: str, subject: str, body: str, subtype: str = "html") -> bool:
    """Send one message. Returns False when mail is disabled or sending failed."""
    if not mail_enabled():
        logger.debug("Mail disabled; skipping '%s' to %s", subject, to_email)
        return False
    try:
        message = MessageSchema(  # type: ignore
            subject=subject,
            recipients=[to_email],  # type: ignore
            body=body,
            subtype=MessageType.plain if subtype == "plain" else MessageType.html,  # type: ignore
        )
        await FastMail(get_mail_config()).send_message(message)
        logger.info("Email sent to %s: %s", to_email, subject)
        return True
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False


async def notify_leave_submitted(
    approver_emails: Iterable[str],
    employee_name: str,
    leave_type: str,
    from_date: str,
    to_date: str,
    total_days: float,
    reason: Optional[str],
) -> None:
    """Tell every admin/md that a request is waiting."""
    body = f"""
    <html>
        <body>
            <p>Hello,</p>
            <p><strong>{employee_name}</strong> has requested <strong>{leave_type}</strong> leave
            from {from_date} to {to_date} ({total_days} days).</p>
            <p>Reason:<br><em>{reason or 'N/A'}</em></p>
            <p><a href="{FRONTEND_URL}/admin">Review pending requests</a></p>
        </body>
    </html>
    """
    for email in approver_emails:
        await send_email(email, f"New Leave Request from {employee_name}", body)


async def notify_leave_decision(
    to_email: str,
    employee_name: str,
    leave_type: str,
    from_date: str,
    to_date: str,
    status: str,
    comment: Optional[str] = None,
) -> None:
    """Tell the owner their request was approved or rejected."""
    body = f"""
    <html>
        <body>
            <p>Hello {employee_name},</p>
            <p>Your <strong>{leave_type}</strong> leave request from {from_date} to {to_date}
            has been <strong>{status}</strong>.</p>
            {f'<p>Comment: <em>{comment}</em></p>' if comment else ''}
            <p><a href="{FRONTEND_URL}/leave-details">View your requests</a></p>
        </body>
    </html>
    """
    await send_email(to_email, f"Leave Request {status.capitalize()}", body)
