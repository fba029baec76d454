"""
Tests for the Mapbox geocoder wrapper
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from geopy.exc import GeocoderServiceError, GeocoderTimedOut

from wander.core.errors import ServiceNotConfiguredError
from wander.core.geocoding import Geocoder
from wander.core.settings import Settings


def _location(lat, lng, place_name, place_id="poi.1", context=None):
    raw = {"id": place_id, "place_name": place_name, "center": [lng, lat]}
    if context is not None:
        raw["context"] = context
    return SimpleNamespace(latitude=lat, longitude=lng, address=place_name, raw=raw)


@pytest.fixture
def geo_settings():
    return Settings(MAPBOX_TOKEN="", GEOCODE_COUNTRY="in", LOG_FILE="")


async def test_geocode_returns_first_match(geo_settings):
    client = MagicMock()
    client.geocode.return_value = _location(
        9.93, 76.26, "Fort Kochi, Kerala, India",
        context=[{"text": "Kochi"}, {"text": "Kerala"}, {"id": "no-text"}],
    )
    geocoder = Geocoder(geo_settings, client=client)

    result = await geocoder.geocode("Fort Kochi")

    assert result.latitude == 9.93
    assert result.longitude == 76.26
    assert result.place_name == "Fort Kochi, Kerala, India"
    assert result.place_id == "poi.1"
    assert result.context == ["Kochi", "Kerala"]

    args, kwargs = client.geocode.call_args
    assert args == ("Fort Kochi",)
    assert kwargs["country"] == "in"
    assert kwargs["bbox"] == geo_settings.geocode_bbox_points


async def test_no_match_returns_none(geo_settings):
    client = MagicMock()
    client.geocode.return_value = None

    assert await Geocoder(geo_settings, client=client).geocode("Atlantis") is None


async def test_blank_name_skips_lookup(geo_settings):
    client = MagicMock()
    assert await Geocoder(geo_settings, client=client).geocode("  ") is None
    client.geocode.assert_not_called()


async def test_failures_are_independent(geo_settings):
    def fake_geocode(name, **kwargs):
        if name == "Timeout Town":
            raise GeocoderTimedOut("slow")
        if name == "Broken City":
            raise GeocoderServiceError("500")
        return _location(10.0, 77.0, f"{name}, India")

    client = MagicMock()
    client.geocode.side_effect = fake_geocode
    geocoder = Geocoder(geo_settings, client=client)

    results = await geocoder.geocode_many(["Ooty", "Timeout Town", "Broken City", "Coorg"])

    assert [r.place_name if r else None for r in results] == [
        "Ooty, India", None, None, "Coorg, India",
    ]


async def test_unconfigured_geocoder_raises(geo_settings):
    geocoder = Geocoder(geo_settings)

    assert geocoder.configured is False
    with pytest.raises(ServiceNotConfiguredError):
        await geocoder.geocode_many(["Goa"])


def test_bbox_corners_are_lat_lng_pairs():
    settings = Settings(GEOCODE_BBOX="68.0,6.0,97.0,35.0", LOG_FILE="")
    assert settings.geocode_bbox_points == [(6.0, 68.0), (35.0, 97.0)]


async def test_unexpected_errors_do_not_fail_the_batch(geo_settings):
    def fake_geocode(name, **kwargs):
        if name == "Bad Payload":
            return SimpleNamespace(latitude=None, longitude=None, address=None, raw={"id": "poi.x"})
        if name == "Crash":
            raise RuntimeError("socket closed")
        return _location(12.3, 75.9, f"{name}, India")

    client = MagicMock()
    client.geocode.side_effect = fake_geocode
    geocoder = Geocoder(geo_settings, client=client)

    results = await geocoder.geocode_many(["Madikeri", "Bad Payload", "Crash"])

    assert results[0].place_name == "Madikeri, India"
    assert results[1:] == [None, None]
