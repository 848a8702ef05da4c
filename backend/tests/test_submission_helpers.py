from datetime import datetime

import pytest
from fastapi import Request

from contact_relay.core.settings import Settings
from contact_relay.lib.messages import message_text
from contact_relay.lib.notification import build_notification, format_timestamp
from contact_relay.lib.submission import (
    SubmissionError,
    client_ip,
    is_valid_email,
    parse_submission,
    preview,
)


def _request(headers=None, client=("198.51.100.4", 41000)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_parse_submission_keeps_values_as_submitted():
    sub = parse_submission({"name": " Anna ", "email": "anna@example.org", "service": "SEO", "message": "hi\n"})
    assert sub.name == " Anna "
    assert sub.message == "hi\n"


@pytest.mark.parametrize("email", [" anna@example.org", "anna@example.org ", "anna@example.org\n"])
def test_parse_submission_checks_email_as_submitted(email):
    with pytest.raises(SubmissionError) as err:
        parse_submission({"name": "Anna", "email": email, "service": "SEO", "message": "hi"})
    assert err.value.reason == "invalid_email"


def test_parse_submission_rejects_non_object_payloads():
    with pytest.raises(SubmissionError) as err:
        parse_submission(["name", "email"])
    assert err.value.reason == "required"


def test_parse_submission_flags_bad_email_after_required_fields():
    with pytest.raises(SubmissionError) as err:
        parse_submission({"name": "A", "email": "a@b", "service": "S", "message": "M"})
    assert err.value.reason == "invalid_email"


def test_email_pattern():
    assert is_valid_email("user@mail.example.com")
    assert is_valid_email("first.last+tag@sub.domain.io")
    assert not is_valid_email("user@localhost")
    assert not is_valid_email("user name@example.com")
    assert not is_valid_email("user@example.com\n")


def test_client_ip_prefers_first_forwarded_hop():
    req = _request({"X-Forwarded-For": "203.0.113.9, 10.1.1.1"})
    assert client_ip(req) == "203.0.113.9"


def test_client_ip_falls_back_to_socket_peer():
    assert client_ip(_request()) == "198.51.100.4"
    assert client_ip(_request(client=None)) == "unknown"


def test_preview_truncates_long_messages():
    assert preview("x" * 80) == "x" * 50 + "..."
    assert preview("short") == "short..."


def test_message_text_falls_back_to_default_locale():
    assert message_text("sent", "de") == message_text("sent", "ru")


def test_build_notification_escapes_html_and_keeps_text_raw():
    settings = Settings(_env_file=None, EMAIL_USER="owner@example.com", EMAIL_PASSWORD="pw", EMAIL_TO=None)
    sub = parse_submission({
        "name": "<b>Eve</b>",
        "email": "eve@example.com",
        "service": "Design",
        "message": "line one\nline <two>",
    })
    mail = build_notification(sub, settings, ip="192.0.2.1", sent_at=datetime(2024, 3, 5, 9, 7, 1))

    assert mail.to == "owner@example.com"
    assert mail.subject == f"{settings.mail_subject_prefix}Design - <b>Eve</b>"
    assert "&lt;b&gt;Eve&lt;/b&gt;" in mail.html
    assert "<b>Eve</b>" not in mail.html
    assert "line one<br>line &lt;two&gt;" in mail.html
    assert "line one\nline <two>" in mail.text
    assert "05.03.2024, 09:07:01" in mail.text
    assert "192.0.2.1" in mail.html


def test_format_timestamp():
    assert format_timestamp(datetime(2026, 12, 31, 23, 59, 0)) == "31.12.2026, 23:59:00"


def test_html_body_only_breaks_on_newlines():
    settings = Settings(_env_file=None, EMAIL_USER="owner@example.com", EMAIL_PASSWORD="pw")
    sub = parse_submission({
        "name": "Anna",
        "email": "anna@example.org",
        "service": "SEO",
        "message": "a\rb c\n\n",
    })
    mail = build_notification(sub, settings, ip="192.0.2.1")
    assert "a\rb c<br><br>" in mail.html


def test_subject_collapses_line_breaks():
    settings = Settings(_env_file=None, EMAIL_USER="owner@example.com", EMAIL_PASSWORD="pw", MAIL_SUBJECT_PREFIX="")
    sub = parse_submission({
        "name": "Ivan\nPetrov",
        "email": "ivan@example.com",
        "service": "Web\r\n  design",
        "message": "hi",
    })
    mail = build_notification(sub, settings, ip="192.0.2.1")
    assert mail.subject == "Web design - Ivan Petrov"
    assert "Ivan\nPetrov" in mail.text
