import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from voice_agent.core.config import settings
from voice_agent.core.errors import ToolError, UpstreamUnavailable
from voice_agent.core.timezone import to_home
from voice_agent.models.calendar import Appointment

logger = logging.getLogger(__name__)


def _send_email_sync(to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
    """Send email via SMTP (blocking). Raises UpstreamUnavailable when not sent."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), not sending to %s", to_email)
        raise UpstreamUnavailable("Email is not configured.")
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    if text_body is not None:
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=settings.external_call_timeout_seconds
        ) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("Failed to send email to %s: %s", to_email, e)
        raise UpstreamUnavailable("Email could not be sent.") from e
    logger.info("Email sent to %s", to_email)


async def send_email(to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
    """Send without blocking the event loop, bounded by the external call timeout."""
    try:
        await asyncio.wait_for(
            asyncio.to_thread(_send_email_sync, to_email, subject, html_body, text_body),
            timeout=settings.external_call_timeout_seconds,
        )
    except TimeoutError as e:
        logger.warning("Email to %s timed out", to_email)
        raise UpstreamUnavailable("Email timed out.") from e


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _wrap_html(title: str, inner: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="margin:0;padding:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Oxygen,Ubuntu,sans-serif;background-color:#f3f4f6;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color:#f3f4f6;">
    <tr>
      <td align="center" style="padding:40px 16px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:640px;background:#ffffff;border-radius:12px;overflow:hidden;">
          <tr>
            <td style="padding:32px;">
              {inner}
            </td>
          </tr>
          <tr>
            <td style="padding:20px 32px;background:#f9fafb;border-top:1px solid #e5e7eb;">
              <p style="margin:0;font-size:13px;color:#6b7280;">Sent by {_html_escape(settings.from_name)}</p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def build_appointment_confirmation_html(appointment: Appointment) -> str:
    """HTML body for a booking confirmation, times shown in home time."""
    start = to_home(appointment.start)
    end = to_home(appointment.end)
    minutes = int((appointment.end - appointment.start).total_seconds() // 60)
    date_str = start.strftime("%A, %B %d, %Y")
    slot_display = f"{start.strftime('%I:%M %p')} – {end.strftime('%I:%M %p')} ({settings.time_zone_name})"
    name = _html_escape(appointment.attendee.name or "there")
    inner = f"""
              <h1 style="margin:0 0 8px 0;font-size:22px;font-weight:600;color:#111827;">Appointment Confirmed</h1>
              <p style="margin:0 0 24px 0;font-size:15px;color:#6b7280;">Hi {name}, you are booked for <strong>{_html_escape(appointment.title)}</strong>.</p>
              <p style="margin:0 0 8px 0;font-size:12px;text-transform:uppercase;color:#6b7280;">Date</p>
              <p style="margin:0;font-size:16px;font-weight:600;color:#111827;">{date_str}</p>
              <p style="margin:12px 0 0 0;font-size:12px;text-transform:uppercase;color:#6b7280;">Time ({minutes}-minute session)</p>
              <p style="margin:0;font-size:16px;font-weight:600;color:#111827;">{slot_display}</p>"""
    return _wrap_html("Appointment Confirmation", inner)


async def send_appointment_confirmation_email(appointment: Appointment) -> bool:
    """Best-effort confirmation; failures are logged and reported as False."""
    subject = f"{settings.from_name} – Appointment Confirmed"
    try:
        await send_email(
            appointment.attendee.email,
            subject,
            build_appointment_confirmation_html(appointment),
        )
    except ToolError as e:
        logger.warning("Confirmation email to %s not sent: %s", appointment.attendee.email, e.message)
        return False
    except Exception as e:
        logger.exception("Failed to send confirmation email to %s: %s", appointment.attendee.email, e)
        return False
    return True


def build_collateral_html(title: str, content: str) -> str:
    inner = f"""
              <h1 style="margin:0 0 16px 0;font-size:20px;font-weight:600;color:#111827;">{_html_escape(title)}</h1>
              <pre style="margin:0;white-space:pre-wrap;font-family:inherit;font-size:14px;color:#374151;">{_html_escape(content)}</pre>"""
    return _wrap_html(_html_escape(title), inner)
