from sqlalchemy.exc import OperationalError

from storefront.api import routes


def test_healthy(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["services"] == {"database": "connected", "api": "running"}
    assert body["version"] == routes.API_VERSION


def test_unhealthy_when_database_fails(client, monkeypatch):
    def _broken(session):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(routes, "ping", _broken)

    resp = client.get("/api/health")

    assert resp.status_code == 500
    assert resp.json()["status"] == "unhealthy"
    assert resp.json()["services"]["database"] == "disconnected"
    assert "connection refused" in resp.json()["error"]


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_unhandled_errors_are_generic(client, monkeypatch):
    def _explode(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr("storefront.services.catalog.trending_products", _explode)

    resp = client.get("/api/products/trending")

    assert resp.status_code == 500
    assert resp.json() == {"error": "An unexpected error occurred. Please try again."}
