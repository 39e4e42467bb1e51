"""
Tests for the analytics API endpoints.
"""

import pytest


class TestHealthEndpoints:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["version"] == "1.0.0"


class TestSalesEndpoints:

    def test_summary(self, client):
        response = client.get("/api/analytics/sales/summary")
        assert response.status_code == 200

        data = response.json()
        assert data["scope"]["location_id"] == "all"
        assert data["scope"]["label"] == "Last 30 Days"
        summary = data["summary"]
        assert summary["total_orders"] > 0
        assert summary["average_order_value"] == pytest.approx(
            summary["total_sales"] / summary["total_orders"], abs=0.01
        )

    def test_location_scope(self, client):
        everywhere = client.get("/api/analytics/sales/summary").json()["summary"]
        one = client.get("/api/analytics/sales/summary", params={"location_id": "loc_002"}).json()["summary"]
        assert 0 < one["total_orders"] < everywhere["total_orders"]

    def test_channel_filter(self, client):
        everywhere = client.get("/api/analytics/sales/summary").json()["summary"]
        response = client.get("/api/analytics/sales/summary", params={"channel": ["takeout", "delivery"]})
        assert response.status_code == 200
        assert 0 < response.json()["summary"]["total_orders"] < everywhere["total_orders"]

    def test_unknown_channel_rejected(self, client):
        response = client.get("/api/analytics/sales/summary", params={"channel": "drive-thru"})
        assert response.status_code == 422

    def test_custom_range(self, client):
        response = client.get("/api/analytics/sales/summary", params={
            "start": "2024-03-10T00:00:00", "end": "2024-03-10T23:59:59",
        })
        assert response.status_code == 200
        assert response.json()["scope"]["label"] == "Custom Range"

    def test_inverted_range_rejected(self, client):
        response = client.get("/api/analytics/sales/summary", params={
            "start": "2024-03-10T00:00:00", "end": "2024-03-09T00:00:00",
        })
        assert response.status_code == 400

    def test_start_without_end_rejected(self, client):
        response = client.get("/api/analytics/sales/summary", params={"start": "2024-03-10T00:00:00"})
        assert response.status_code == 400

    def test_unknown_preset_rejected(self, client):
        response = client.get("/api/analytics/sales/summary", params={"preset": "last_decade"})
        assert response.status_code == 400

    def test_growth(self, client):
        response = client.get("/api/analytics/sales/growth", params={"preset": "last_7_days"})
        assert response.status_code == 200
        assert response.json()["growth"]["period_label"] == "vs last 7 days"

    def test_top_items(self, client):
        response = client.get("/api/analytics/sales/top-items", params={"mode": "quantity", "limit": 3})
        assert response.status_code == 200

        items = response.json()["items"]
        assert [item["rank"] for item in items] == [1, 2, 3]
        quantities = [item["total_quantity"] for item in items]
        assert quantities == sorted(quantities, reverse=True)

    def test_top_items_defaults_to_five(self, client):
        assert len(client.get("/api/analytics/sales/top-items").json()["items"]) == 5

    def test_top_items_bad_parameters(self, client):
        assert client.get("/api/analytics/sales/top-items", params={"mode": "hype"}).status_code == 422
        assert client.get("/api/analytics/sales/top-items", params={"limit": -1}).status_code == 400

    @pytest.mark.parametrize("path,key", [
        ("/api/analytics/sales/daily", "days"),
        ("/api/analytics/sales/hourly", "hours"),
        ("/api/analytics/sales/channels", "channels"),
    ])
    def test_breakdowns(self, client, path, key):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()[key]

    def test_ranges(self, client):
        data = client.get("/api/analytics/ranges").json()
        assert data["this_week"]["start"] == "2024-03-10T00:00:00"


class TestTimestampParameters:

    def test_offset_as_of_against_local_data_rejected(self, client):
        response = client.get("/api/analytics/sales/summary", params={"as_of": "2024-03-15T12:00:00Z"})
        assert response.status_code == 400

    def test_offset_range_against_local_data_rejected(self, client):
        response = client.get("/api/analytics/sales/summary", params={
            "start": "2024-03-10T00:00:00+00:00", "end": "2024-03-10T23:59:59+00:00",
        })
        assert response.status_code == 400

    def test_ranges_offset_as_of_rejected(self, client):
        response = client.get("/api/analytics/ranges", params={"as_of": "2024-03-15T12:00:00Z"})
        assert response.status_code == 400

    def test_utc_as_of_against_utc_data(self, utc_client):
        response = utc_client.get("/api/analytics/sales/summary", params={"as_of": "2024-03-15T18:00:00Z"})
        assert response.status_code == 200
        assert response.json()["summary"]["total_orders"] > 0

    def test_offsets_converted_to_data_timezone(self, utc_client):
        data = utc_client.get("/api/analytics/ranges", params={"as_of": "2024-03-15T20:00:00+02:00"}).json()
        assert data["today"]["start"] == "2024-03-15T00:00:00+00:00"
        assert data["last_7_days"]["end"] == "2024-03-15T18:00:00+00:00"

    def test_naive_range_read_in_data_timezone(self, utc_client):
        response = utc_client.get("/api/analytics/sales/summary", params={
            "start": "2024-03-10T00:00:00", "end": "2024-03-10T23:59:59",
        })
        assert response.status_code == 200
        assert response.json()["scope"]["start"] == "2024-03-10T00:00:00+00:00"


class TestOperationsEndpoints:

    def test_locations(self, client):
        locations = client.get("/api/analytics/locations/performance").json()["locations"]
        assert [location["rank"] for location in locations] == [1, 2, 3]

    def test_location_filter(self, client):
        response = client.get("/api/analytics/locations/performance", params={"location_id": "loc_001"})
        assert [location["location_id"] for location in response.json()["locations"]] == ["loc_001"]

    def test_labor_summary(self, client):
        data = client.get("/api/analytics/labor/summary").json()
        summary = data["summary"]
        assert summary["shift_count"] > 0
        assert summary["total_regular_hours"] <= 8 * summary["shift_count"] + 0.01
        assert data["daily"]

    def test_top_staff(self, client):
        response = client.get("/api/analytics/staff/top", params={"mode": "hours", "limit": 2})
        staff = response.json()["staff"]
        assert len(staff) == 2
        assert staff[0]["hours_worked"] >= staff[1]["hours_worked"]

    def test_wastage(self, client):
        report = client.get("/api/analytics/wastage").json()["report"]
        assert report["ingredients"]
        assert all(line["estimated_wastage_cost"] >= 0 for line in report["ingredients"])

    def test_tasks(self, client):
        data = client.get("/api/analytics/tasks/summary").json()
        assert data["summary"]["total"] > 0
        assert data["staff"][0]["rank"] == 1

    def test_profit_by_week(self, client):
        response = client.get("/api/analytics/profit", params={"period": "week"})
        assert response.status_code == 200

        data = response.json()
        assert data["entries"]
        assert data["summary"]["rental_cost"] > 0

    def test_profit_unknown_period(self, client):
        assert client.get("/api/analytics/profit", params={"period": "year"}).status_code == 400
