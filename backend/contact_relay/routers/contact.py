# contact_relay/routers/contact.py
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from contact_relay.core.mailer import AUTH_ERROR, CONNECTION_ERROR
from contact_relay.core.settings import Settings
from contact_relay.lib.messages import METHOD_NOT_ALLOWED, message_text
from contact_relay.lib.notification import build_notification
from contact_relay.lib.submission import SubmissionError, client_ip, parse_submission, preview

router = APIRouter(tags=["contact"])
log = logging.getLogger("uvicorn.error")

ALL_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


def _reply(status_code: int, body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=dict(CORS_HEADERS))


def _failure(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return _reply(status_code, body)


def failure_message_key(exc: Exception) -> str:
    code = getattr(exc, "code", None)
    if code == AUTH_ERROR:
        return "auth_failed"
    if code == CONNECTION_ERROR:
        return "connection_failed"
    return "send_failed"


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        log.warning(f"[contact] body is not valid JSON ({len(raw)} bytes)")
        return {}


@router.api_route("/", methods=ALL_METHODS, include_in_schema=False)
@router.api_route("/api/send-email", methods=ALL_METHODS)
async def send_email(request: Request):
    settings: Settings = request.app.state.settings
    mailer = request.app.state.mailer
    locale = settings.contact_locale

    if request.method == "OPTIONS":
        return Response(status_code=200, headers=dict(CORS_HEADERS))

    if request.method != "POST":
        return _failure(405, METHOD_NOT_ALLOWED)

    try:
        submission = parse_submission(await _read_json(request))
    except SubmissionError as e:
        return _failure(400, message_text(e.reason, locale))

    if not settings.mail_configured:
        log.error("[contact] EMAIL_USER/EMAIL_PASSWORD not set; refusing to send")
        return _failure(500, message_text("not_configured", locale))

    log.info(
        f"[contact] received name={submission.name!r} email={submission.email!r} "
        f"service={submission.service!r} message={preview(submission.message)!r}"
    )

    mail = build_notification(submission, settings, ip=client_ip(request))

    try:
        log.info("[contact] verifying SMTP connection")
        await mailer.verify_connection()
        result = await mailer.send(mail)
    except Exception as e:
        log.error(f"[contact] send failed: {e.__class__.__name__}: {e}")
        key = failure_message_key(e)
        detail = str(e) if settings.expose_errors else None
        return _failure(500, message_text(key, locale), error=detail)

    log.info(f"[contact] mail sent id={result.message_id}")
    return _reply(200, {"success": True, "message": message_text("sent", locale)})
