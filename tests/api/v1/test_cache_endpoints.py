import pytest

from transport_api.jobs.cache_cleanup import CLEANUP_JOB_ID, CacheCleanupScheduler


def test_diagnostics_after_traffic(api_client):
    api_client.get("/api/v1/vehicles")
    api_client.get("/api/v1/vehicles")

    response = api_client.get("/api/v1/cache/diagnostics")

    assert response.status_code == 200
    body = response.json()
    assert body["hit_count"] == 1
    assert body["miss_count"] == 1
    assert body["hit_ratio"] == 0.5
    assert body["total_entries"] == 1
    assert body["recent_entries"][0]["key"] == "realtime:all-vehicles"
    assert body["recent_entries"][0]["data_type"] == "dict"


def test_diagnostics_idle(api_client):
    body = api_client.get("/api/v1/cache/diagnostics").json()

    assert body["total_requests"] == 0
    assert body["hit_ratio"] == 0.0
    assert body["recent_entries"] == []


def test_config_in_development(api_client):
    response = api_client.get("/api/v1/cache/config")

    assert response.status_code == 200
    body = response.json()
    assert body["realtime_cache_seconds"] == 30
    assert body["static_cache_hours"] == 24
    assert body["cache_size_limit"] == 100
    assert body["compaction_threshold"] == 0.25


def test_key_check(api_client):
    api_client.get("/api/v1/vehicles/42")

    present = api_client.get("/api/v1/cache/keys/realtime:vehicle:42").json()
    absent = api_client.get("/api/v1/cache/keys/realtime:vehicle:43").json()

    assert present["exists"] is True
    assert absent["exists"] is False


@pytest.mark.parametrize("path", ["/api/v1/cache/config", "/api/v1/cache/keys/anything"])
def test_inspection_hidden_outside_development(api_client, api_settings, path):
    api_settings.environment = "production"

    assert api_client.get(path).status_code == 404


def test_config_reports_cleanup_job(api_client, api_settings, api_cache):
    api_client.app.state.cache_cleanup = CacheCleanupScheduler(api_settings, api_cache)

    body = api_client.get("/api/v1/cache/config").json()

    assert body["cleanup_job"]["scheduler_running"] is False
    assert body["cleanup_job"]["jobs"][0]["id"] == CLEANUP_JOB_ID


def test_config_without_cleanup_job(api_client):
    assert api_client.get("/api/v1/cache/config").json()["cleanup_job"] is None


def test_expiration_check_entry_expires(api_client, clock):
    response = api_client.post("/api/v1/cache/test-expiration/10")

    assert response.status_code == 200
    body = response.json()
    assert body["key"] == "test-expiration-120000"
    assert body["expiration_seconds"] == 10
    key_path = f"/api/v1/cache/keys/{body['key']}"
    assert api_client.get(key_path).json()["exists"] is True

    clock.advance(seconds=10)
    assert api_client.get(key_path).json()["exists"] is False


@pytest.mark.parametrize("seconds", [0, -5])
def test_expiration_check_rejects_non_positive_seconds(api_client, seconds):
    assert api_client.post(f"/api/v1/cache/test-expiration/{seconds}").status_code == 400


def test_expiration_check_hidden_outside_development(api_client, api_settings):
    api_settings.environment = "production"

    assert api_client.post("/api/v1/cache/test-expiration/10").status_code == 404
