import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Optional

from todo_api import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int
    user: Optional[str]
    password: Optional[str]
    ssl: bool = False
    starttls: bool = True


class Mailer:
    """Plain-text mail over SMTP. Without settings every send is skipped."""

    def __init__(self, settings: Optional[SMTPSettings], sender: str):
        self.settings = settings
        self.sender = sender

    @classmethod
    def from_config(cls) -> "Mailer":
        if config.RESEND_API_KEY:
            logger.info("Mail: using Resend SMTP")
            settings = SMTPSettings("smtp.resend.com", 587, "resend", config.RESEND_API_KEY)
        elif config.SMTP_HOST:
            logger.info("Mail: using SMTP server %s:%s", config.SMTP_HOST, config.SMTP_PORT)
            settings = SMTPSettings(
                config.SMTP_HOST,
                config.SMTP_PORT,
                config.SMTP_USER,
                config.SMTP_PASSWORD,
                ssl=config.SMTP_SSL,
                starttls=not config.SMTP_SSL,
            )
        elif config.MAIL_USER and config.MAIL_PASS:
            logger.info("Mail: using Gmail SMTP (app password)")
            settings = SMTPSettings("smtp.gmail.com", 465, config.MAIL_USER, config.MAIL_PASS, ssl=True, starttls=False)
        else:
            logger.warning("Mail transport not configured. Set RESEND_API_KEY, SMTP_HOST or MAIL_USER/MAIL_PASS.")
            settings = None
        return cls(settings, config.MAIL_FROM)

    @property
    def configured(self) -> bool:
        return self.settings is not None

    def send(self, to: str, subject: str, body: str) -> bool:
        """Deliver one message. Returns False when no transport is configured.

        SMTP and socket errors propagate to the caller.
        """
        if self.settings is None:
            logger.warning("Skipping email to %s: transport not configured", to)
            return False

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        s = self.settings
        smtp_cls = smtplib.SMTP_SSL if s.ssl else smtplib.SMTP
        with smtp_cls(s.host, s.port, timeout=30) as server:
            if s.starttls and not s.ssl:
                server.starttls()
            if s.user:
                server.login(s.user, s.password or "")
            server.sendmail(self.sender, [to], msg.as_string())
        logger.info("Email sent to %s: %s", to, subject)
        return True


_mailer: Optional[Mailer] = None


def get_mailer() -> Mailer:
    global _mailer
    if _mailer is None:
        _mailer = Mailer.from_config()
    return _mailer
