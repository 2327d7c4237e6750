"""
Email service.

Transactional emails over SMTP (aiosmtplib). Delivery failures are
logged and reported as False, never raised: emails are sent after the
financial commit and must not affect it.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Any

import aiosmtplib
from loguru import logger

from app.config.settings import settings

DEPOSIT_CONFIRMED = "deposit_confirmed"
WITHDRAWAL_STATUS = "withdrawal_status"
STAKE_COMPLETED = "stake_completed"


def _layout(title: str, color: str, body: str, link: str, link_text: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; background: #0f172a; color: #e2e8f0; padding: 20px;">
  <div style="max-width: 600px; margin: 0 auto; background: #1e293b; border-radius: 12px; padding: 40px;">
    <h1 style="color: {color}; text-align: center;">{title}</h1>
    {body}
    <div style="text-align: center; margin: 30px 0;">
      <a href="{settings.app_url}{link}"
         style="background: #22c55e; color: white; padding: 12px 24px; border-radius: 8px; text-decoration: none; font-weight: bold;">
        {link_text}
      </a>
    </div>
  </div>
</body>
</html>"""


def render_template(template: str, variables: dict[str, Any]) -> tuple[str, str, str]:
    """
    Render email template.

    Args:
        template: Template name
        variables: Template variables

    Returns:
        Tuple of (subject, html_body, text_body)

    Raises:
        ValueError: Unknown template
    """
    name = escape(str(variables.get("name") or "there"))
    amount = escape(str(variables.get("amount", "")))
    currency = escape(str(variables.get("currency", "USD")))

    if template == DEPOSIT_CONFIRMED:
        text = (
            f"Your deposit of {amount} {currency} has been confirmed "
            "and credited to your account."
        )
        html = _layout(
            "Deposit Confirmed",
            "#22c55e",
            f"<p>Hello {name},</p><p>{text}</p>",
            "/dashboard",
            "View Dashboard",
        )
        return "Deposit Confirmed", html, f"Hello {name},\n\n{text}"

    if template == WITHDRAWAL_STATUS:
        status = str(variables.get("status", "approved"))
        approved = status == "approved"
        title = "Withdrawal Approved" if approved else "Withdrawal Rejected"
        text = (
            f"Your withdrawal request of {amount} {currency} "
            f"has been {escape(status)}."
        )
        reason = variables.get("reason")
        if reason:
            text += f"\nReason: {escape(str(reason))}"
        html = _layout(
            title,
            "#22c55e" if approved else "#ef4444",
            f"<p>Hello {name},</p><p>{text.replace(chr(10), '<br>')}</p>",
            "/withdraw",
            "View Withdrawals",
        )
        return title, html, f"Hello {name},\n\n{text}"

    if template == STAKE_COMPLETED:
        plan = escape(str(variables.get("plan", "")))
        earned = escape(str(variables.get("earned", "")))
        text = (
            f"Your {plan} stake of {amount} has completed. "
            f"Total earned: {earned}."
        )
        html = _layout(
            "Stake Completed",
            "#22c55e",
            f"<p>Hello {name},</p><p>{text}</p>",
            "/orders",
            "View Stakes",
        )
        return "Stake Completed", html, f"Hello {name},\n\n{text}"

    raise ValueError(f"Unknown email template: {template}")


class EmailService:
    """SMTP email delivery."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
    ) -> None:
        """Initialize email service (defaults from settings)."""
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username or settings.smtp_user
        self.password = password or settings.smtp_password
        self.sender = sender or settings.smtp_from

    @property
    def is_configured(self) -> bool:
        """True if SMTP host is set."""
        return bool(self.host)

    async def send_email(
        self, to: str, subject: str, html_body: str, text_body: str | None = None
    ) -> bool:
        """
        Send email via SMTP server.

        Returns:
            True if email sent successfully
        """
        if not self.is_configured:
            logger.warning(f"SMTP not configured, skipping email to {to}")
            return False

        message = MIMEMultipart("alternative")
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        if text_body:
            message.attach(MIMEText(text_body, "plain", "utf-8"))
        message.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=settings.smtp_use_tls,
                timeout=30,
            )
        except aiosmtplib.SMTPException as e:
            logger.error(f"SMTP error while sending email to {to}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error while sending email to {to}: {e}")
            return False

        logger.info(f"Email sent to {to}: {subject}")
        return True

    async def send_templated_email(
        self, to: str | None, template: str, variables: dict[str, Any]
    ) -> bool:
        """
        Render and send a template.

        Args:
            to: Recipient (None skips sending)
            template: Template name
            variables: Template variables

        Returns:
            True if sent
        """
        if not to:
            return False
        try:
            subject, html_body, text_body = render_template(template, variables)
        except ValueError as e:
            logger.error(str(e))
            return False
        return await self.send_email(to, subject, html_body, text_body)
