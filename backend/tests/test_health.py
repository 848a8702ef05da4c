# backend/tests/test_health.py
from fastapi.testclient import TestClient

from contact_relay.core.mailer import FakeMailer, MailConnectionError
from contact_relay.core.settings import Settings
from contact_relay.main import app, create_app

client = TestClient(app)


class UnreachableMailer(FakeMailer):
    async def verify_connection(self):
        raise MailConnectionError("connect ECONNREFUSED")


def _settings(**overrides):
    values = {"EMAIL_USER": "owner@example.com", "EMAIL_PASSWORD": "pw", "APP_ENV": "production"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_health():
    """Basic health endpoint returns status ok."""
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_routes_listing_includes_contact_endpoint():
    resp = client.get("/__routes")
    assert resp.status_code == 200
    paths = {r["path"] for r in resp.json()}
    assert "/api/send-email" in paths
    assert "/" in paths
    assert {"/health", "/health/smtp", "/__routes"} <= paths
    assert len(resp.json()) == len({(r["path"], tuple(r["methods"])) for r in resp.json()})


def test_health_smtp_ok():
    mailer = FakeMailer()
    c = TestClient(create_app(settings=_settings(SMTP_HOST="relay.local"), mailer=mailer))
    resp = c.get("/health/smtp")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "configured": True, "host": "relay.local", "port": 587}
    assert mailer.verified == 1


def test_health_smtp_not_configured_skips_verify():
    mailer = FakeMailer()
    c = TestClient(create_app(settings=_settings(EMAIL_PASSWORD=None), mailer=mailer))
    resp = c.get("/health/smtp")
    assert resp.status_code == 503
    assert resp.json()["configured"] is False
    assert mailer.verified == 0


def test_health_smtp_unreachable_hides_detail_outside_development():
    c = TestClient(create_app(settings=_settings(), mailer=UnreachableMailer()))
    resp = c.get("/health/smtp")
    assert resp.status_code == 503
    assert "error" not in resp.json()

    dev = TestClient(create_app(settings=_settings(APP_ENV="development"), mailer=UnreachableMailer()))
    assert dev.get("/health/smtp").json()["error"] == "connect ECONNREFUSED"
