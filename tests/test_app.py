from app.config import settings


def test_requests_over_the_rate_limit_are_rejected(client):
    allowed = int(settings.rate_limit.split("/")[0])
    statuses = [client.get("/api/v1/tags/catalog").status_code for _ in range(allowed + 1)]

    assert statuses[:allowed] == [200] * allowed
    assert statuses[-1] == 429


def test_health_is_exempt_from_rate_limit(client):
    allowed = int(settings.rate_limit.split("/")[0])
    for _ in range(allowed + 1):
        client.get("/api/v1/tags/catalog")

    responses = [client.get("/health") for _ in range(3)]
    assert [r.status_code for r in responses] == [200, 200, 200]


def test_security_headers(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
