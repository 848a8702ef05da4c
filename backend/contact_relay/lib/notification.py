from datetime import datetime
from email.utils import formataddr
from html import escape
from typing import Optional

from contact_relay.core.mailer import OutgoingMail
from contact_relay.core.settings import Settings
from contact_relay.lib.submission import Submission

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333; }}
        .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; }}
        .content {{ background: #f5f5f5; padding: 20px; }}
        .field {{ margin-bottom: 15px; }}
        .field strong {{ color: #555; }}
        .message {{ background: white; padding: 15px; border-radius: 5px; border-left: 4px solid #667eea; margin-top: 10px; }}
        .footer {{ color: #666; font-size: 12px; margin-top: 20px; padding-top: 20px; border-top: 1px solid #ddd; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>🚀 Новая заявка с сайта</h1>
    </div>
    <div class="content">
        <div class="field"><strong>👤 Имя:</strong> {name}</div>
        <div class="field"><strong>📧 Email:</strong> {email}</div>
        <div class="field"><strong>🛠 Услуга:</strong> {service}</div>
        <div class="field"><strong>💬 Сообщение:</strong></div>
        <div class="message">{message}</div>
    </div>
    <div class="footer">
        <p><strong>📅 Отправлено:</strong> {sent_at}</p>
        <p><strong>🌐 IP:</strong> {ip}</p>
    </div>
</body>
</html>
"""

TEXT_TEMPLATE = """\
Новая заявка с вашего сайта-визитки:

👤 Имя: {name}
📧 Email: {email}
🛠 Услуга: {service}
💬 Сообщение: {message}

📅 Отправлено: {sent_at}
🌐 IP: {ip}
"""


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%d.%m.%Y, %H:%M:%S")


def build_subject(submission: Submission, prefix: str = "") -> str:
    # header values cannot carry line breaks
    service = " ".join(submission.service.split())
    name = " ".join(submission.name.split())
    return f"{prefix}{service} - {name}"


def render_text(submission: Submission, sent_at: str, ip: str) -> str:
    return TEXT_TEMPLATE.format(
        name=submission.name,
        email=submission.email,
        service=submission.service,
        message=submission.message,
        sent_at=sent_at,
        ip=ip,
    )


def render_html(submission: Submission, sent_at: str, ip: str) -> str:
    message = escape(submission.message).replace("\n", "<br>")
    return HTML_TEMPLATE.format(
        name=escape(submission.name),
        email=escape(submission.email),
        service=escape(submission.service),
        message=message,
        sent_at=escape(sent_at),
        ip=escape(ip),
    )


def build_notification(
    submission: Submission,
    settings: Settings,
    ip: str,
    sent_at: Optional[datetime] = None,
) -> OutgoingMail:
    """
    Mail sent to the site owner for one submission.
    sent_at defaults to server-local now.
    """
    stamp = format_timestamp(sent_at or datetime.now())
    return OutgoingMail(
        sender=formataddr((settings.mail_from_name, settings.email_user or "")),
        to=settings.recipient or "",
        subject=build_subject(submission, settings.mail_subject_prefix),
        text=render_text(submission, stamp, ip),
        html=render_html(submission, stamp, ip),
    )
