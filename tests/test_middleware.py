"""
test_middleware.py — Request ids, security headers and error bodies

Verifies the HTTP middleware and exception handlers in main.py.

Called by: pytest
Depends on: compagnon/main.py, tests/conftest.py (client fixture)
"""


def test_request_id_header_present(client):
    resp = client.get("/health")
    assert len(resp.headers["X-Request-ID"]) == 8  # uuid4 hex[:8]


def test_request_id_unique_per_request(client):
    id1 = client.get("/health").headers["X-Request-ID"]
    id2 = client.get("/health").headers["X-Request-ID"]
    assert id1 != id2


def test_security_headers(client):
    resp = client.get("/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-XSS-Protection"] == "1; mode=block"
    assert resp.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"


def test_health(client):
    from compagnon import __version__

    assert client.get("/health").json() == {"status": "ok", "version": __version__}


def test_404_has_error_body_and_request_id(client):
    resp = client.get("/nonexistent-route-xyz")
    assert resp.status_code == 404
    body = resp.json()
    assert body["status_code"] == 404
    assert body["request_id"] == resp.headers["X-Request-ID"]


def test_validation_error_body(client):
    resp = client.put("/api/profile", json={"scope": "Monde"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Validation error"
    assert body["detail"][0]["loc"][-1] == "scope"


def test_http_exception_body(client):
    resp = client.get("/api/tenders/unknown-id")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Appel d'offres introuvable"
