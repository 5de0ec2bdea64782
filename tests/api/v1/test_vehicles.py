"""Endpoint tests for vehicle positions, including HTTP revalidation."""


def test_current_positions(api_client):
    response = api_client.get("/api/v1/vehicles")

    assert response.status_code == 200
    assert response.json() == {
        "6": ["45.5,15.75", "45.25,16.0"],
        "109": ["45.75,15.5"],
    }
    assert response.headers["Cache-Control"] == "public, max-age=5, must-revalidate"
    assert response.headers["ETag"].startswith('"')


def test_matching_etag_returns_not_modified(api_client):
    first = api_client.get("/api/v1/vehicles")
    etag = first.headers["ETag"]

    second = api_client.get("/api/v1/vehicles", headers={"If-None-Match": etag})

    assert second.status_code == 304
    assert second.content == b""
    assert second.headers["ETag"] == etag


def test_stale_etag_returns_body(api_client):
    response = api_client.get("/api/v1/vehicles", headers={"If-None-Match": '"stale"'})

    assert response.status_code == 200
    assert "6" in response.json()


def test_positions_served_from_cache(api_client, fake_upstream):
    api_client.get("/api/v1/vehicles")
    api_client.get("/api/v1/vehicles")

    assert fake_upstream.realtime_calls == 1


def test_positions_refetched_after_ttl(api_client, fake_upstream, clock):
    api_client.get("/api/v1/vehicles")
    clock.advance(seconds=31)
    api_client.get("/api/v1/vehicles")

    assert fake_upstream.realtime_calls == 2


def test_positions_by_route(api_client):
    response = api_client.get("/api/v1/vehicles/route/109")

    assert response.status_code == 200
    assert response.json() == {"109": ["45.75,15.5"]}


def test_enhanced_positions(api_client):
    response = api_client.get("/api/v1/vehicles/enhanced")

    assert response.status_code == 200
    groups = {group["route_id"]: group for group in response.json()}
    assert groups["6"]["route_long_name"] == "Crnomerec - Sopot"
    assert groups["6"]["route_type"] == 0
    assert len(groups["6"]["vehicles"]) == 2


def test_enhanced_by_route_unknown_route_is_404(api_client):
    response = api_client.get("/api/v1/vehicles/route/404/enhanced")

    assert response.status_code == 404
    assert "404" in response.json()["detail"]


def test_single_vehicle(api_client):
    response = api_client.get("/api/v1/vehicles/77")

    assert response.status_code == 200
    body = response.json()
    assert body["route_id"] == "109"
    assert body["latitude"] == 45.75


def test_unknown_vehicle_is_404(api_client):
    assert api_client.get("/api/v1/vehicles/999").status_code == 404


def test_upstream_failure_is_502(api_client, fake_upstream):
    fake_upstream.fail = True

    response = api_client.get("/api/v1/vehicles")

    assert response.status_code == 502
    assert response.json() == {"detail": "GTFS provider is unavailable"}


def test_request_id_header_present(api_client):
    response = api_client.get("/api/v1/vehicles", headers={"X-Request-Id": "abc"})
    assert response.headers["X-Request-Id"] == "abc"
