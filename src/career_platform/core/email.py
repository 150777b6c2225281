"""
Email Service using Resend

Delivers notification emails for the admissions workflow. When no API key
is configured the email is logged instead of sent.
"""

import asyncio
import logging
from html import escape

import resend

from career_platform.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Returns:
        True if the email was sent (or logged in keyless mode)
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def _render(heading: str, body: str) -> str:
    dashboard_url = f"{settings.frontend_url}/dashboard"
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #1a365d; margin-bottom: 24px; }}
            .button {{ display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">{heading}</h1>
            <p>{body}</p>
            <a href="{dashboard_url}" class="button">Open Dashboard</a>
            <div class="footer">
                <p>Career Platform</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_notification_email(to_email: str, subject: str, message: str) -> bool:
    """Send a plain notification message wrapped in the standard template."""
    safe_subject = escape(subject)
    return await send_email(
        to_email=to_email,
        subject=safe_subject,
        html_content=_render(safe_subject, escape(message)),
    )
