# Tests for API v1 health router.
# Created: 2026-10-17

from dirstream import __version__


class TestHealthStatus:
    """Tests for GET /api/v1/health."""

    def test_health_ok(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["upstream"] == "http://upstream.test"
        assert data["version"] == __version__

    def test_health_does_not_contact_upstream(self, client, fake_upstream):
        fake_upstream.error = RuntimeError("upstream must not be called")
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert fake_upstream.requests == []
