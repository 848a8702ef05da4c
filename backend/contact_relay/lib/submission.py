import re
from typing import Any, Optional

from fastapi import Request
from pydantic import BaseModel

REQUIRED_FIELDS = ("name", "email", "service", "message")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


class Submission(BaseModel):
    name: str
    email: str
    service: str
    message: str


class SubmissionError(ValueError):
    """reason is a message key: "required" or "invalid_email"."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def _text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value


def is_valid_email(value: str) -> bool:
    return EMAIL_RE.fullmatch(value) is not None


def parse_submission(payload: Any) -> Submission:
    if not isinstance(payload, dict):
        payload = {}
    fields = {k: _text(payload.get(k)) for k in REQUIRED_FIELDS}
    # whitespace-only is empty; the values themselves pass through untouched
    if not all(v.strip() for v in fields.values()):
        raise SubmissionError("required")
    if not is_valid_email(fields["email"]):
        raise SubmissionError("invalid_email")
    return Submission(**fields)


def client_ip(request: Request) -> str:
    # x-forwarded-for is caller-controlled; only used for the notification footer
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def preview(text: Optional[str], limit: int = 50) -> str:
    text = text or ""
    return text[:limit] + "..."
