"""Tests for the Flask monitoring endpoints."""

import json

import pytest

from gelf_adapter.dashboard import create_dashboard_app
from gelf_adapter.failure_tracker import FailureTracker
from gelf_adapter.metrics import Metrics


@pytest.fixture
def app():
    metrics = Metrics()
    failures = FailureTracker(max_size=100)

    metrics.record_sent(6)
    metrics.record_sent(6)
    metrics.record_dropped("transport")
    failures.add("graylog:12201", "transport", "send failed", "disk full")

    app = create_dashboard_app(metrics, failures, ["graylog:12201"])
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert json.loads(resp.data)["status"] == "ok"


class TestStatsEndpoint:
    def test_stats_returns_metrics(self, client):
        resp = client.get("/stats")
        assert resp.status_code == 200
        data = json.loads(resp.data)

        assert data["sent"] == 2
        assert data["dropped"] == 1
        assert data["level_distribution"]["6"] == 2
        assert data["routes"] == ["graylog:12201"]
        assert data["messages_per_second"] >= 0

    def test_stats_includes_recent_failures(self, client):
        data = json.loads(client.get("/stats").data)
        assert len(data["recent_failures"]) == 1
        assert data["recent_failures"][0]["line"] == "disk full"
