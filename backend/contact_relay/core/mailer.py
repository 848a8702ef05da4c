# contact_relay/core/mailer.py
import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import List, Optional

from contact_relay.core.settings import Settings

log = logging.getLogger("uvicorn.error")

AUTH_ERROR = "EAUTH"
CONNECTION_ERROR = "ECONNECTION"
MESSAGE_ERROR = "EMESSAGE"


@dataclass
class OutgoingMail:
    sender: str
    to: str
    subject: str
    text: str
    html: str


@dataclass
class SendResult:
    message_id: str


# -----------------------
# Errors
# -----------------------
class MailTransportError(Exception):
    def __init__(self, message: str, code: str = MESSAGE_ERROR):
        super().__init__(message)
        self.code = code


class MailAuthError(MailTransportError):
    def __init__(self, message: str):
        super().__init__(message, code=AUTH_ERROR)


class MailConnectionError(MailTransportError):
    def __init__(self, message: str):
        super().__init__(message, code=CONNECTION_ERROR)


def _translate(exc: Exception) -> MailTransportError:
    if isinstance(exc, MailTransportError):
        return exc
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return MailAuthError(f"Invalid login: {exc.smtp_code} {_reply_text(exc.smtp_error)}")
    if isinstance(exc, smtplib.SMTPConnectError):
        return MailConnectionError(f"Connection refused by relay: {exc.smtp_code} {_reply_text(exc.smtp_error)}")
    if isinstance(exc, smtplib.SMTPServerDisconnected):
        return MailConnectionError(f"Relay closed the connection: {exc}")
    if isinstance(exc, smtplib.SMTPResponseException):
        return MailTransportError(f"{exc.smtp_code} {_reply_text(exc.smtp_error)}", code=str(exc.smtp_code))
    if isinstance(exc, smtplib.SMTPException):
        return MailTransportError(str(exc) or exc.__class__.__name__)
    if isinstance(exc, OSError):
        # socket errors: refused, DNS failure, timeout, TLS handshake
        return MailConnectionError(str(exc) or exc.__class__.__name__)
    return MailTransportError(str(exc) or exc.__class__.__name__)


def _reply_text(raw) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", "replace")
    return str(raw)


# -----------------------
# SMTP
# -----------------------
class SmtpMailer:
    """
    Talks to an SMTP relay with smtplib.

    Every call opens its own session; smtplib is blocking, so the work runs
    in a worker thread. Library failures come out as MailTransportError.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: Optional[str],
        password: Optional[str],
        secure: bool = False,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.email_user,
            password=settings.email_password,
            secure=settings.smtp_secure,
            timeout=settings.smtp_timeout,
        )

    def _open(self) -> smtplib.SMTP:
        ctx = ssl.create_default_context()
        if self.secure:
            smtp = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=ctx)
        else:
            smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            smtp.ehlo()
            if not self.secure and smtp.has_extn("starttls"):
                smtp.starttls(context=ctx)
                smtp.ehlo()
            if self.user and self.password:
                smtp.login(self.user, self.password)
        except BaseException:
            smtp.close()
            raise
        return smtp

    def _verify_sync(self) -> None:
        with self._open() as smtp:
            smtp.noop()

    def _send_sync(self, mail: OutgoingMail) -> SendResult:
        msg = EmailMessage()
        msg["From"] = mail.sender
        msg["To"] = mail.to
        msg["Subject"] = mail.subject
        msg["Message-ID"] = make_msgid(domain=_domain_of(self.user) or self.host)
        msg.set_content(mail.text)
        msg.add_alternative(mail.html, subtype="html")

        with self._open() as smtp:
            refused = smtp.send_message(msg)
        if refused:
            raise MailTransportError(f"Recipients refused: {', '.join(sorted(refused))}")
        return SendResult(message_id=msg["Message-ID"])

    async def verify_connection(self) -> None:
        try:
            await asyncio.to_thread(self._verify_sync)
        except Exception as exc:
            raise _translate(exc) from exc

    async def send(self, mail: OutgoingMail) -> SendResult:
        try:
            return await asyncio.to_thread(self._send_sync, mail)
        except Exception as exc:
            raise _translate(exc) from exc


def _domain_of(address: Optional[str]) -> Optional[str]:
    if not address or "@" not in address:
        return None
    return address.rsplit("@", 1)[1] or None


# -----------------------
# Fake (local runs, no network)
# -----------------------
class FakeMailer:
    def __init__(self):
        self.outbox: List[OutgoingMail] = []
        self.verified = 0

    async def verify_connection(self) -> None:
        self.verified += 1

    async def send(self, mail: OutgoingMail) -> SendResult:
        self.outbox.append(mail)
        message_id = f"<fake-{len(self.outbox)}@contact-relay.local>"
        log.info(f"[mailer] fake send to={mail.to} subject={mail.subject!r} id={message_id}")
        return SendResult(message_id=message_id)


def build_mailer(settings: Settings):
    provider = settings.mail_provider.strip().lower()
    if provider == "fake":
        return FakeMailer()
    if provider == "smtp":
        return SmtpMailer.from_settings(settings)
    raise RuntimeError(f"Unknown MAIL_PROVIDER: {settings.mail_provider!r} (expected smtp or fake)")
