"""
Integration Tests - HTTP API

The app is built without its lifespan, so no Postgres or Redis is needed;
the analytics data source dependency is swapped for an in-memory one.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from conftest import FailingSource, FakeAnalyticsSource, FakeItem, FakeOrder, auth_header, make_token
from merchant_analytics.analytics.bucketing import utc_now
from merchant_analytics.config import get_settings
from merchant_analytics.serving.api import create_api_app
from merchant_analytics.serving.api.dependencies import get_analytics_source
from merchant_analytics.serving.api.routes import admin_analytics

pytestmark = pytest.mark.integration


def client_for(source) -> TestClient:
    app = create_api_app()
    app.dependency_overrides[get_analytics_source] = lambda: source
    return TestClient(app)


@pytest.fixture
def recent_source() -> FakeAnalyticsSource:
    now = utc_now()
    return FakeAnalyticsSource(
        [
            FakeOrder(now - timedelta(days=1), 100.0, currency="IDR",
                      items=[FakeItem(1, "Nasi Goreng", 2, 100.0)]),
            FakeOrder(now - timedelta(days=1), 50.0, currency="AUD",
                      items=[FakeItem(2, "Flat White", 1, 50.0)]),
            FakeOrder(now - timedelta(hours=2), 10.0, status="CANCELLED"),
        ],
        [now - timedelta(days=100), now - timedelta(days=1)],
    )


class TestChartsEndpoint:

    def test_returns_chart_envelope(self, recent_source, admin_headers):
        response = client_for(recent_source).get("/api/admin/analytics/charts?period=7d", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True

        data = body["data"]
        assert data["period"] == "7d"
        assert set(data) == {
            "period", "revenueData", "revenueDataByCurrency", "customerGrowth",
            "activityHeatmap", "summary", "revenueByCurrency", "monthOverMonth",
        }
        assert len(data["revenueData"]) == 8
        assert len(data["activityHeatmap"]) == 168
        assert data["summary"]["totalRevenue"] == 150.0
        assert data["summary"]["totalOrders"] == 2
        assert data["summary"]["currentTotalCustomers"] == 2
        assert data["revenueByCurrency"]["IDR"]["totalRevenue"] == 100.0
        assert data["revenueByCurrency"]["AUD"]["avgOrderValue"] == 50.0
        assert set(data["revenueData"][0]) == {"date", "revenue", "orderCount"}
        assert set(data["activityHeatmap"][0]) == {"dayOfWeek", "hour", "orderCount"}

    def test_default_period(self, recent_source, admin_headers):
        response = client_for(recent_source).get("/api/admin/analytics/charts", headers=admin_headers)

        assert response.json()["data"]["period"] == "30d"
        assert len(response.json()["data"]["revenueData"]) == 31

    def test_unknown_period_falls_back(self, recent_source, admin_headers):
        response = client_for(recent_source).get("/api/admin/analytics/charts?period=5y", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["period"] == "30d"

    def test_requires_token(self, recent_source):
        response = client_for(recent_source).get("/api/admin/analytics/charts")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["success"] is False
        assert response.json()["error"] == "UNAUTHORIZED"

    def test_rejects_merchant_role(self, recent_source, merchant_headers):
        response = client_for(recent_source).get("/api/admin/analytics/charts", headers=merchant_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"

    def test_failure_returns_internal_error(self, admin_headers):
        response = client_for(FailingSource()).get("/api/admin/analytics/charts", headers=admin_headers)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "INTERNAL_ERROR",
            "message": "Failed to fetch chart data",
        }

    def test_cached_response_is_served(self, recent_source, admin_headers, monkeypatch):
        class MemoryCache:
            available = True

            def __init__(self):
                self.store = {}

            async def get(self, key):
                return self.store.get(key)

            async def set(self, key, value, ttl=None):
                self.store[key] = value
                return True

        settings = get_settings()
        cached_settings = settings.model_copy(
            update={"analytics": settings.analytics.model_copy(update={"cache_enabled": True})}
        )
        cache = MemoryCache()
        monkeypatch.setattr(admin_analytics, "get_settings", lambda: cached_settings)
        monkeypatch.setattr(admin_analytics, "analytics_cache", cache)

        first = client_for(recent_source).get("/api/admin/analytics/charts?period=7d", headers=admin_headers)
        assert "charts:7d" in cache.store

        # Served from cache even though every read would now fail
        second = client_for(FailingSource()).get("/api/admin/analytics/charts?period=7d", headers=admin_headers)

        assert second.status_code == 200
        assert second.json() == first.json()


class TestSalesEndpoint:

    def test_month_report(self, recent_source, merchant_headers):
        response = client_for(recent_source).get("/api/merchant/analytics/sales", headers=merchant_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["meta"]["period"] == "month"
        assert body["meta"]["startDate"].endswith("Z")
        assert set(body["data"]) == {
            "summary", "revenueTrend", "topSellingItems", "peakHours",
            "ordersByStatus", "paymentMethods", "orderTypes",
        }
        assert len(body["data"]["peakHours"]) == 24

    def test_custom_report(self, recent_source, merchant_headers):
        response = client_for(recent_source).get(
            "/api/merchant/analytics/sales",
            params={"period": "custom", "startDate": "2020-01-01", "endDate": "2020-01-31"},
            headers=merchant_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["summary"]["totalOrders"] == 0
        assert response.json()["meta"]["endDate"].startswith("2020-01-31T23:59:59")

    @pytest.mark.parametrize("params", [
        {"period": "custom"},
        {"period": "custom", "startDate": "2024-05-01"},
        {"period": "custom", "startDate": "2024-05-10", "endDate": "2024-05-01"},
        {"period": "custom", "startDate": "soon", "endDate": "2024-05-01"},
    ])
    def test_invalid_custom_range(self, recent_source, merchant_headers, params):
        response = client_for(recent_source).get(
            "/api/merchant/analytics/sales", params=params, headers=merchant_headers
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_rejects_super_admin(self, recent_source, admin_headers):
        response = client_for(recent_source).get("/api/merchant/analytics/sales", headers=admin_headers)

        assert response.status_code == 403

    def test_merchant_without_selection(self, recent_source):
        headers = auth_header(make_token("MERCHANT_OWNER"))

        response = client_for(recent_source).get("/api/merchant/analytics/sales", headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == "No merchant selected"

    def test_failure_returns_analytics_error(self, merchant_headers):
        response = client_for(FailingSource()).get("/api/merchant/analytics/sales", headers=merchant_headers)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "ANALYTICS_ERROR",
            "message": "Failed to fetch sales analytics",
        }


class TestServiceEndpoints:

    def test_liveness(self):
        response = client_for(FakeAnalyticsSource()).get("/api/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readiness_without_database(self):
        response = client_for(FakeAnalyticsSource()).get("/api/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_info(self):
        response = client_for(FakeAnalyticsSource()).get("/api/info")

        assert response.json()["name"] == "Merchant Analytics API"

    def test_request_id_echoed(self):
        response = client_for(FakeAnalyticsSource()).get(
            "/api/health/live", headers={"X-Request-ID": "abc123"}
        )

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-RateLimit-Remaining" in response.headers
