import os
import smtplib
import ssl
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List, Optional

logger = logging.getLogger(__name__)

SMTP_PROFILES = ("SMTP_PRIMARY", "SMTP_SECONDARY")


@dataclass
class SMTPConfig:
    host: str
    port: int
    user: Optional[str]
    password: Optional[str]
    use_tls: bool
    use_ssl: bool
    sender: str


def _bool_env(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_smtp(prefix: str) -> Optional[SMTPConfig]:
    host = os.environ.get(f"{prefix}_HOST")
    port_raw = os.environ.get(f"{prefix}_PORT")
    sender = os.environ.get(f"{prefix}_FROM")
    if not host or not port_raw or not sender:
        return None

    try:
        port = int(port_raw)
    except ValueError:
        raise RuntimeError(f"Invalid {prefix}_PORT: {port_raw}")

    return SMTPConfig(
        host=host,
        port=port,
        user=os.environ.get(f"{prefix}_USER"),
        password=os.environ.get(f"{prefix}_PASS"),
        use_tls=_bool_env(os.environ.get(f"{prefix}_TLS"), default=True),
        use_ssl=_bool_env(os.environ.get(f"{prefix}_SSL"), default=False),
        sender=sender,
    )


def _build_message(config: SMTPConfig, to_email: str, subject: str, html: str, text: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = config.sender
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(text)
    message.add_alternative(html, subtype="html")
    return message


def _send_via_config(config: SMTPConfig, message: EmailMessage) -> None:
    context = ssl.create_default_context()
    if config.use_ssl:
        with smtplib.SMTP_SSL(config.host, config.port, context=context, timeout=20) as server:
            if config.user and config.password:
                server.login(config.user, config.password)
            server.send_message(message)
        return

    with smtplib.SMTP(config.host, config.port, timeout=20) as server:
        server.ehlo()
        if config.use_tls:
            server.starttls(context=context)
            server.ehlo()
        if config.user and config.password:
            server.login(config.user, config.password)
        server.send_message(message)


def send_email(to_email: str, subject: str, html: str, text: str) -> None:
    configs: List[SMTPConfig] = [cfg for cfg in (_load_smtp(prefix) for prefix in SMTP_PROFILES) if cfg]
    if not configs:
        raise RuntimeError("SMTP_PRIMARY configuration missing")

    last_error: Optional[Exception] = None
    for config in configs:
        try:
            _send_via_config(config, _build_message(config, to_email, subject, html, text))
            return
        except Exception as exc:
            logger.warning("SMTP %s failed, trying next profile: %s", config.host, exc)
            last_error = exc
    raise RuntimeError(f"All SMTP profiles failed: {last_error}")


def send_notification(to_email: str, subject: str, html: str, text: str) -> bool:
    """Fire-and-forget wrapper used from background tasks."""
    try:
        send_email(to_email, subject, html, text)
    except Exception as exc:
        logger.warning("Notification to %s not sent: %s", to_email, exc)
        return False
    logger.info("Notification sent to %s", to_email)
    return True
