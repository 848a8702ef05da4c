# contact_relay/main.py
from fastapi import FastAPI
from fastapi.routing import APIRoute
import logging

from contact_relay.core.mailer import build_mailer
from contact_relay.core.settings import Settings, settings as default_settings
from contact_relay.routers.contact import router as contact_router
from contact_relay.routers.health import router as health_router

log = logging.getLogger("uvicorn.error")


def create_app(settings: Settings | None = None, mailer=None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title=settings.api_title)

    # Built once from startup configuration; requests never re-read the env
    app.state.settings = settings
    app.state.mailer = mailer if mailer is not None else build_mailer(settings)

    log.info(
        f"[main] mail provider={settings.mail_provider} host={settings.smtp_host}:{settings.smtp_port} "
        f"credentials={'set' if settings.mail_configured else 'missing'} env={settings.app_env}"
    )

    # Routers
    routers = [health_router, contact_router]
    for r in routers:
        app.include_router(r)

    @app.get("/__routes")
    async def __routes():
        # newer FastAPI wraps included routers in app.routes; list from the routers themselves
        routes = [r for router in routers for r in router.routes]
        routes += [r for r in app.routes if isinstance(r, APIRoute)]
        out, seen = [], set()
        for r in routes:
            if not isinstance(r, APIRoute):
                continue
            key = (r.path, tuple(sorted(r.methods)))
            if key in seen:
                continue
            seen.add(key)
            out.append({"methods": list(key[1]), "path": r.path})
        return out

    return app


app = create_app()
