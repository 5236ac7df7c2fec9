"""Tests for the broker statistics API and the application wiring."""


class TestStatus:
    """Tests for GET /api/v1/status"""

    def test_status_reports_active_bridge(self, client):
        response = client.get("/api/v1/status")

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "active"
        assert data["plugin"]["name"] == "prometheus"
        assert data["plugin"]["type"] == "monitoring"
        assert data["metrics_path"] == "/metrics"
        assert data["instruments"] == 37
        assert data["pusher_running"] is True
        assert data["push_count"] >= 1

    def test_status_without_bridge_returns_503(self):
        from fastapi import FastAPI
        from fastapi.testclient import TestClient

        from mqtt_exporter.api.v1 import router
        from mqtt_exporter.services.metrics.instance import set_metrics_bridge

        set_metrics_bridge(None)
        app = FastAPI()
        app.include_router(router)

        response = TestClient(app).get("/api/v1/status")

        assert response.status_code == 503
        assert "not initialized" in response.json()["detail"]


class TestReportStats:
    """Tests for POST /api/v1/stats"""

    def test_reported_stats_reach_metrics_after_push(self, client):
        from mqtt_exporter.services.metrics.instance import get_metrics_bridge
        from mqtt_exporter.services.stats.instance import get_broker_stats

        response = client.post("/api/v1/stats", json={
            "bytes": {"sent": 100, "recv": 50},
            "clients": {"connected": 3},
        })

        assert response.status_code == 202
        data = response.json()
        assert data["status"] == "accepted"
        assert set(data["reported"]) == {"bytes.sent", "bytes.recv", "clients.connected"}

        bridge = get_metrics_bridge()
        bridge.push(get_broker_stats().snapshot())

        scrape = client.get("/metrics").text
        assert "mqtt_bytes_total_sent_total 100.0" in scrape
        assert "mqtt_bytes_total_recv_total 50.0" in scrape
        assert "mqtt_clients_connected 3.0" in scrape

    def test_malformed_snapshot_rejected(self, client):
        response = client.post("/api/v1/stats", json={"bytes": {"sent": "lots"}})

        assert response.status_code == 422

    def test_infinite_counter_delta_does_not_poison_counter(self, client):
        from mqtt_exporter.services.metrics.instance import get_metrics_bridge
        from mqtt_exporter.services.stats.instance import get_broker_stats

        bridge = get_metrics_bridge()
        client.post("/api/v1/stats", json={"bytes": {"sent": "inf"}})
        bridge.push(get_broker_stats().snapshot())
        client.post("/api/v1/stats", json={"bytes": {"sent": 5}})
        bridge.push(get_broker_stats().snapshot())

        assert bridge.value("mqtt_bytes_total_sent") == 5.0

    def test_unknown_fields_ignored(self, client):
        response = client.post("/api/v1/stats", json={"uptime": 12, "bytes": {"sent": 1}})

        assert response.status_code == 202
        assert response.json()["reported"] == ["bytes.sent"]


def test_scrape_endpoint_served_by_app(client):
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "mqtt_server_uptime" in response.text
