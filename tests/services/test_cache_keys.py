from datetime import date, datetime, timedelta, timezone

import pytest

from transport_api.models.gtfs import GtfsStaticFile
from transport_api.services import cache_keys
from transport_api.services.gtfs_errors import InvalidCacheArgumentError


def test_realtime_keys_carry_no_date():
    assert cache_keys.all_vehicles_key() == "realtime:all-vehicles"
    assert cache_keys.all_vehicles_enhanced_key() == "realtime:all-vehicles-enhanced"
    assert cache_keys.vehicle_key("42") == "realtime:vehicle:42"
    assert cache_keys.vehicles_by_route_key("6") == "realtime:route:6"
    assert cache_keys.vehicles_by_route_enhanced_key("6") == "realtime:route-enhanced:6"


def test_static_keys_include_utc_date():
    day = date(2024, 1, 1)
    assert cache_keys.all_routes_key(day) == "static:routes:2024-01-01"
    assert cache_keys.route_info_key("6", day) == "static:route-info:6:2024-01-01"
    assert (
        cache_keys.static_file_key(GtfsStaticFile.SHAPES, day)
        == "static:file:shapes:2024-01-01"
    )
    assert cache_keys.route_shape_key("6", day) == "shape:route:6:2024-01-01"


def test_keys_rotate_across_utc_midnight():
    before = datetime(2024, 1, 1, 23, 59, 59, tzinfo=timezone.utc)
    after = before + timedelta(seconds=2)

    assert cache_keys.all_routes_key(before) != cache_keys.all_routes_key(after)
    assert cache_keys.route_shape_key("6", before) != cache_keys.route_shape_key("6", after)


def test_keys_stable_within_one_utc_day():
    morning = datetime(2024, 3, 5, 0, 0, 1, tzinfo=timezone.utc)
    evening = datetime(2024, 3, 5, 23, 59, 0, tzinfo=timezone.utc)

    assert cache_keys.all_routes_key(morning) == cache_keys.all_routes_key(evening)


def test_local_times_are_converted_to_utc():
    # 00:30 in UTC+2 is still the previous day in UTC.
    local = datetime(2024, 6, 2, 0, 30, tzinfo=timezone(timedelta(hours=2)))
    assert cache_keys.utc_date_stamp(local) == "2024-06-01"


def test_identifiers_are_stripped():
    assert cache_keys.vehicle_key("  42 ") == "realtime:vehicle:42"


@pytest.mark.parametrize("bad", ["", "   "])
def test_empty_identifiers_rejected(bad):
    with pytest.raises(InvalidCacheArgumentError):
        cache_keys.vehicle_key(bad)
    with pytest.raises(InvalidCacheArgumentError):
        cache_keys.route_shape_key(bad)
