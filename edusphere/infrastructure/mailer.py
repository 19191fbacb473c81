"""Outgoing email over SMTP.

``send`` reports delivery with a boolean and never raises, so a failed
send is always a recoverable outcome for the calling flow. Without an SMTP
host the mailer runs in development mode and only logs the message.
"""
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from edusphere.core.config import Settings
from edusphere.core.logging import get_logger, redact_email

logger = get_logger(__name__)


class Mailer(Protocol):
    def send(self, to: str, subject: str, html_body: str) -> bool: ...


class SmtpMailer:
    """SMTP mailer with STARTTLS or implicit TLS."""

    def __init__(
        self,
        *,
        host: Optional[str] = None,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: int = 10,
        from_email: Optional[str] = None,
        from_name: str = "EduSphere",
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_email = from_email or username
        self.from_name = from_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
            from_email=settings.mail_from,
            from_name=settings.mail_from_name,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.from_email)

    def _build_message(self, to: str, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def send(self, to: str, subject: str, html_body: str) -> bool:
        """Send an HTML email. Returns True if the server accepted it."""
        if not self.is_configured:
            logger.warning("SMTP not configured - logging email instead of sending")
            logger.info(f"EMAIL WOULD BE SENT: {subject}", extra={"email": redact_email(to)})
            return True

        try:
            msg = self._build_message(to, subject, html_body)
            context = ssl.create_default_context()

            if self.use_tls:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    if self.username and self.password:
                        server.login(self.username, self.password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP_SSL(
                    self.host, self.port, context=context, timeout=self.timeout
                ) as server:
                    if self.username and self.password:
                        server.login(self.username, self.password)
                    server.send_message(msg)

            logger.info(f"Email sent: {subject}", extra={"email": redact_email(to)})
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                f"Failed to send email '{subject}': {e}",
                extra={"email": redact_email(to)},
            )
            return False
