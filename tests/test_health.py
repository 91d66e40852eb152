"""Health and root endpoints (no authentication), request logging."""

import logging

from mpay24_gateway.core.logging import APP_LOGGER, setup_logger


class TestHealth:
    def test_root_returns_app_info(self, test_client):
        r = test_client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data.get("name") == "mpay24 Payment Gateway"
        assert "version" in data
        assert data.get("status") == "running"

    def test_health_returns_ok(self, test_client):
        r = test_client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data.get("status") == "healthy"
        assert data["components"]["database"] == "ok"

    def test_unknown_path_returns_json_404(self, test_client):
        r = test_client.get("/does-not-exist")
        assert r.status_code == 404
        assert r.json()["error"] == "Not Found"


class TestRequestLogging:
    def test_request_id_is_generated(self, test_client):
        r = test_client.get("/health")
        assert len(r.headers["X-Request-ID"]) == 32
        assert float(r.headers["X-Process-Time"]) >= 0

    def test_request_id_is_echoed(self, test_client):
        r = test_client.get("/", headers={"X-Request-ID": "checkout-abc-1"})
        assert r.headers["X-Request-ID"] == "checkout-abc-1"

    def test_setup_logger_configures_app_tree(self):
        logger = setup_logger(logging.INFO)
        setup_logger(logging.INFO)

        assert logger.name == APP_LOGGER
        assert len(logger.handlers) == 1
        assert logging.getLogger("apscheduler").level == logging.WARNING
