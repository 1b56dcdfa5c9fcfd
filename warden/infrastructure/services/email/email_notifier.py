"""Email notifier for account verification and password reset links.

Renders the HTML templates shipped in ``warden/templates/email`` with Jinja2
and delivers them through fastapi-mail. In test mode the email is rendered
and logged but never handed to an SMTP server.

Security Features:
- HTML escaping by default to prevent XSS from template variables
- Recipients and tokens are masked in every log line
- SMTP failures surface as EmailServiceError without driver details
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound

from warden.core.config.settings import settings
from warden.core.exceptions import EmailServiceError, TemplateRenderError
from warden.domain.interfaces.services import INotifier
from warden.domain.value_objects.email import mask_email, mask_token
from warden.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))),
    "templates",
    "email",
)


def build_connection_config() -> ConnectionConfig:
    """Translate the EMAIL_* settings into a fastapi-mail connection config."""
    password = settings.EMAIL_SMTP_PASSWORD.get_secret_value() if settings.EMAIL_SMTP_PASSWORD else ""
    return ConnectionConfig(
        MAIL_USERNAME=settings.EMAIL_SMTP_USERNAME or "",
        MAIL_PASSWORD=password,
        MAIL_FROM=settings.EMAIL_FROM_EMAIL,
        MAIL_FROM_NAME=settings.EMAIL_FROM_NAME,
        MAIL_PORT=settings.EMAIL_SMTP_PORT,
        MAIL_SERVER=settings.EMAIL_SMTP_HOST,
        MAIL_STARTTLS=settings.EMAIL_SMTP_USE_TLS,
        MAIL_SSL_TLS=settings.EMAIL_SMTP_USE_SSL,
        USE_CREDENTIALS=bool(settings.EMAIL_SMTP_USERNAME and password),
        VALIDATE_CERTS=True,
    )


class EmailNotifier(INotifier):
    """Sends verification and password reset emails.

    Attributes:
        frontend_url: Base URL the links in the emails point at
        test_mode: Log emails instead of sending them
    """

    def __init__(
        self,
        fastmail: Optional[FastMail] = None,
        test_mode: Optional[bool] = None,
        templates_dir: Optional[str] = None,
        frontend_url: Optional[str] = None,
    ):
        self.test_mode = settings.EMAIL_TEST_MODE if test_mode is None else test_mode
        self.frontend_url = (frontend_url or settings.FRONTEND_URL).rstrip("/")

        template_dir = Path(templates_dir or settings.EMAIL_TEMPLATES_DIR or DEFAULT_TEMPLATES_DIR)
        if not template_dir.is_dir():
            raise TemplateRenderError(f"Template directory not found: {template_dir}")
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        if fastmail is not None:
            self._fastmail = fastmail
        elif self.test_mode:
            self._fastmail = None
        else:
            self._fastmail = FastMail(build_connection_config())

        logger.info("EmailNotifier initialized", test_mode=self.test_mode, templates_dir=str(template_dir))

    async def send_verification_email(self, email: str, token: str, language: str = "en") -> None:
        url = f"{self.frontend_url}/verify-email?token={token}"
        await self._send(
            email=email,
            token=token,
            template_name="verification_email.html",
            subject=get_translated_message("verification_email_subject", language),
            context={
                "heading": get_translated_message("verification_email_heading", language),
                "body": get_translated_message("verification_email_body", language),
                "action_label": get_translated_message("verification_email_action", language),
                "action_url": url,
            },
            language=language,
        )

    async def send_password_reset_email(self, email: str, token: str, language: str = "en") -> None:
        url = f"{self.frontend_url}/reset-password?token={token}"
        await self._send(
            email=email,
            token=token,
            template_name="password_reset_email.html",
            subject=get_translated_message("password_reset_email_subject", language),
            context={
                "heading": get_translated_message("password_reset_email_heading", language),
                "body": get_translated_message("password_reset_email_body", language),
                "action_label": get_translated_message("password_reset_email_action", language),
                "expiry_note": get_translated_message("password_reset_email_expiry", language),
                "action_url": url,
            },
            language=language,
        )

    async def _send(
        self,
        email: str,
        token: str,
        template_name: str,
        subject: str,
        context: Dict[str, Any],
        language: str,
    ) -> None:
        html = self.render(
            template_name,
            subject=subject,
            language=language,
            app_name=settings.PROJECT_NAME,
            ignore_notice=get_translated_message("email_ignore_notice", language),
            **context,
        )

        if self.test_mode:
            logger.info(
                "Email sent in test mode",
                to_email=mask_email(email),
                subject=subject,
                template=template_name,
                token=mask_token(token),
                html_length=len(html),
            )
            return

        if self._fastmail is None:
            raise EmailServiceError("FastMail not configured for production mode")

        message = MessageSchema(
            subject=subject,
            recipients=[email],
            body=html,
            subtype=MessageType.html,
        )
        try:
            await self._fastmail.send_message(message)
        except Exception as e:
            logger.error(
                "Failed to send email",
                to_email=mask_email(email),
                template=template_name,
                error=str(e),
            )
            raise EmailServiceError(f"Failed to send email: {e}") from e

        logger.info("Email sent successfully", to_email=mask_email(email), template=template_name)

    def render(self, template_name: str, **context: Any) -> str:
        """Render an email template.

        Raises:
            TemplateRenderError: If the template is missing or fails to render
        """
        try:
            return self.jinja_env.get_template(template_name).render(**context)
        except TemplateNotFound as e:
            logger.error("Template not found", template=template_name)
            raise TemplateRenderError(f"Template file not found: {template_name}") from e
        except TemplateError as e:
            logger.error("Template rendering failed", template=template_name, error=str(e))
            raise TemplateRenderError(f"Template rendering failed: {e}") from e
