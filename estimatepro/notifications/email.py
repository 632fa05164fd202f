"""Email notification service for EstiMate Pro.

Sends password reset links and new-lead alerts via SMTP.
"""
from __future__ import annotations

import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = structlog.get_logger(__name__)


class EmailService:
    """Service for sending emails with template support."""

    def __init__(self):
        self.smtp_host = os.getenv("SMTP_HOST", "smtp.gmail.com")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_user = os.getenv("SMTP_USER", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.from_email = os.getenv("FROM_EMAIL", self.smtp_user)

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )

    @property
    def configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    def send_email(
        self,
        to_emails: list[str],
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> bool:
        """Send an email.

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.configured:
            logger.warning("smtp_not_configured", to=to_emails, subject=subject)
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = ", ".join(to_emails)

        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("email_send_failed", to=to_emails, subject=subject, error=str(exc))
            return False

        logger.info("email_sent", to=to_emails, subject=subject)
        return True

    def render_template(self, template_name: str, context: dict[str, Any]) -> str:
        template = self.jinja_env.get_template(template_name)
        return template.render(**context)

    def send_password_reset(
        self, to_email: str, name: str, reset_url: str, expiry_minutes: int
    ) -> bool:
        html_body = self.render_template(
            "password_reset.html",
            {"name": name or "there", "reset_url": reset_url, "expiry_minutes": expiry_minutes},
        )
        text_body = f"Reset your EstiMate Pro password: {reset_url}"
        return self.send_email([to_email], "Reset your EstiMate Pro password", html_body, text_body)

    def send_new_lead_alert(self, to_email: str, lead: dict[str, Any]) -> bool:
        """Tell a builder a client just submitted their survey.

        Args:
            to_email: Builder email
            lead: client_name, client_phone, client_email, client_suburb,
                bathroom_type, tiling_level and estimate_range
        """
        html_body = self.render_template("new_lead.html", lead)
        subject = f"New lead: {lead.get('client_name', 'New client')}"
        return self.send_email([to_email], subject, html_body)
