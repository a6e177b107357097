# app/services/email_service.py
import asyncio
import logging
import smtplib
import uuid
from dataclasses import dataclass
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from typing import Optional

from jinja2 import Template

from app.config import Settings, settings
from app.core.utils import retry_on_failure

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    """Result of email sending operation"""
    success: bool
    message: str
    timestamp: datetime
    error_details: Optional[str] = None


class EmailTemplates:
    """Email templates"""

    BASE_TEMPLATE = """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{{ title }}</title>
    </head>
    <body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; background-color: #f8f9fa;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color: #f8f9fa;">
            <tr>
                <td align="center" style="padding: 40px 20px;">
                    <table role="presentation" width="600" cellspacing="0" cellpadding="0" style="background: white; border-radius: 12px; overflow: hidden;">
                        <tr>
                            <td style="background: #4f46e5; padding: 32px 20px; text-align: center;">
                                <h1 style="color: white; margin: 0; font-size: 26px;">QuizRoom</h1>
                                <p style="color: rgba(255,255,255,0.9); margin: 8px 0 0 0; font-size: 15px;">{{ header_subtitle }}</p>
                            </td>
                        </tr>
                        <tr>
                            <td style="padding: 32px 28px;">
                                {{ content }}
                            </td>
                        </tr>
                        <tr>
                            <td style="background: #f9fafb; padding: 16px; text-align: center; border-top: 1px solid #e5e7eb;">
                                <p style="color: #6b7280; font-size: 12px; margin: 0;">&copy; {{ year }} QuizRoom</p>
                            </td>
                        </tr>
                    </table>
                </td>
            </tr>
        </table>
    </body>
    </html>
    """

    RESET_CONTENT = """
        <p style="color: #374151; font-size: 16px; line-height: 1.6; margin: 0 0 24px 0;">
            Click the link below to reset your password:
        </p>
        <p style="text-align: center; margin: 0 0 24px 0;">
            <a href="{{ reset_link }}" style="background: #4f46e5; color: white; padding: 12px 24px; border-radius: 8px; text-decoration: none;">Reset Password</a>
        </p>
        <p style="color: #9ca3af; font-size: 12px; margin: 0;">
            This link expires in {{ expire_minutes }} minutes. If you didn't request it, please ignore this email.
        </p>
    """


class EmailService:
    """SMTP email sender with template rendering and retry"""

    def __init__(self, config: Settings = settings):
        self.config = config
        self.templates = EmailTemplates()

    async def send_password_reset_email(self, email: str, reset_link: str) -> EmailResult:
        """Send the password reset link"""
        if not self.config.is_email_configured():
            return EmailResult(
                success=False,
                message="Email is not configured",
                timestamp=datetime.now()
            )

        subject = "Reset Your Password"
        content_html = self._render_template(
            self.templates.RESET_CONTENT,
            reset_link=reset_link,
            expire_minutes=self.config.reset_token_expire_minutes
        )
        full_html = self._render_template(
            self.templates.BASE_TEMPLATE,
            title=subject,
            header_subtitle="Password Reset",
            content=content_html,
            year=datetime.now().year
        )
        text_content = (
            "Password Reset\n\n"
            f"Open this link to reset your password: {reset_link}\n\n"
            f"This link expires in {self.config.reset_token_expire_minutes} minutes."
        )

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.config.from_name} <{self.config.from_email}>"
        msg['To'] = email
        msg['Message-ID'] = self._generate_message_id()
        msg['Date'] = formatdate(localtime=True)
        msg.attach(MIMEText(text_content, 'plain', 'utf-8'))
        msg.attach(MIMEText(full_html, 'html', 'utf-8'))

        try:
            await self._deliver(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send reset email to {email}: {str(e)}")
            return EmailResult(
                success=False,
                message="Failed to send email",
                timestamp=datetime.now(),
                error_details=str(e)
            )

        logger.info(f"Reset email sent to {email}")
        return EmailResult(success=True, message="Email sent", timestamp=datetime.now())

    @retry_on_failure(max_retries=3, delay=1.0, backoff=2.0, retry_on=(smtplib.SMTPException, OSError))
    async def _deliver(self, msg: MIMEMultipart) -> None:
        await asyncio.to_thread(self._send_blocking, msg)

    def _send_blocking(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=15) as conn:
            conn.starttls()
            conn.login(self.config.smtp_username, self.config.smtp_password)
            conn.send_message(msg)

    def _render_template(self, template_str: str, **kwargs) -> str:
        """Render Jinja2 template with data"""
        return Template(template_str).render(**kwargs)

    def _generate_message_id(self) -> str:
        domain = self.config.from_email.split('@')[-1] or "localhost"
        return f"<{uuid.uuid4()}@{domain}>"
