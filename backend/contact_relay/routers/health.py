# contact_relay/routers/health.py
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/health", tags=["health"])
log = logging.getLogger("uvicorn.error")

@router.get("")
async def health_root():
    return {"status": "ok"}

@router.get("/smtp")
async def health_smtp(request: Request):
    settings = request.app.state.settings
    body = {
        "ok": False,
        "configured": settings.mail_configured,
        "host": settings.smtp_host,
        "port": settings.smtp_port,
    }
    if not settings.mail_configured:
        return JSONResponse(status_code=503, content=body)

    try:
        await request.app.state.mailer.verify_connection()
    except Exception as e:
        log.warning(f"[health] SMTP verify failed: {e}")
        if settings.expose_errors:
            body["error"] = str(e)
        return JSONResponse(status_code=503, content=body)

    body["ok"] = True
    return body
