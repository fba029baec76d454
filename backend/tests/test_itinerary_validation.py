"""
Tests for itinerary creation payload validation
"""

import math
from datetime import datetime, timezone

import pytest

from wander.core.errors import (
    InputValidationError,
    InvalidCoordinatesError,
    InvalidPayloadError,
    InvalidPinFieldError,
    InvalidPinTitleError,
    InvalidTitleError,
    NoPinsError,
)
from wander.core.pins import PinIcon, PinType
from wander.core.validation import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PIN_TITLE_LENGTH,
    MAX_TITLE_LENGTH,
    validate_itinerary_payload,
)


def _pin(**overrides):
    pin = {"latitude": 10.0, "longitude": 76.5, "title": "Fort Kochi"}
    pin.update(overrides)
    return pin


def _payload(**overrides):
    payload = {"title": "Kerala trip", "pins": [_pin()]}
    payload.update(overrides)
    return payload


class TestRejections:
    """Each problem maps to its own error, checked in a fixed order"""

    @pytest.mark.parametrize("payload", [None, [], "title", 3])
    def test_non_object_body(self, payload):
        with pytest.raises(InvalidPayloadError):
            validate_itinerary_payload(payload)

    @pytest.mark.parametrize("title", [None, "", "   ", 12])
    def test_missing_or_blank_title(self, title):
        with pytest.raises(InvalidTitleError) as exc:
            validate_itinerary_payload(_payload(title=title))
        assert exc.value.message == "Title is required"

    @pytest.mark.parametrize("pins", [None, [], "pins", {}])
    def test_missing_or_empty_pins(self, pins):
        with pytest.raises(NoPinsError):
            validate_itinerary_payload(_payload(pins=pins))

    def test_title_checked_before_pins(self):
        with pytest.raises(InvalidTitleError):
            validate_itinerary_payload({"title": " ", "pins": []})

    @pytest.mark.parametrize("lat,lng", [
        ("10.0", 76.5),
        (10.0, None),
        (True, 76.5),
        (math.nan, 76.5),
        (10.0, math.inf),
    ])
    def test_non_numeric_coordinates(self, lat, lng):
        with pytest.raises(InvalidCoordinatesError) as exc:
            validate_itinerary_payload(_payload(pins=[_pin(latitude=lat, longitude=lng)]))
        assert exc.value.message == "Invalid pin coordinates"

    @pytest.mark.parametrize("lat,lng", [(91, 0), (-90.5, 0), (0, 180.1), (0, -181)])
    def test_out_of_range_coordinates(self, lat, lng):
        with pytest.raises(InvalidCoordinatesError):
            validate_itinerary_payload(_payload(pins=[_pin(latitude=lat, longitude=lng)]))

    def test_coordinates_checked_before_title(self):
        with pytest.raises(InvalidCoordinatesError):
            validate_itinerary_payload(_payload(pins=[{"latitude": "x", "title": ""}]))

    @pytest.mark.parametrize("title", [None, "", "  "])
    def test_blank_pin_title(self, title):
        with pytest.raises(InvalidPinTitleError) as exc:
            validate_itinerary_payload(_payload(pins=[_pin(), _pin(title=title)]))
        assert exc.value.message == "All pins must have a title"

    def test_non_object_pin(self):
        with pytest.raises(InvalidCoordinatesError):
            validate_itinerary_payload(_payload(pins=["not a pin"]))

    @pytest.mark.parametrize("field,value", [
        ("orderIndex", "first"),
        ("orderIndex", 1.5),
        ("day", "two"),
        ("date", "next tuesday"),
        ("date", 20240101),
    ])
    def test_malformed_optional_fields(self, field, value):
        with pytest.raises(InvalidPinFieldError):
            validate_itinerary_payload(_payload(pins=[_pin(**{field: value})]))

    def test_overlong_title(self):
        with pytest.raises(InvalidTitleError) as exc:
            validate_itinerary_payload(_payload(title="x" * (MAX_TITLE_LENGTH + 1)))
        assert exc.value.message == "Title must be at most 200 characters"

    def test_title_at_column_width_is_accepted(self):
        result = validate_itinerary_payload(_payload(title="x" * MAX_TITLE_LENGTH))
        assert len(result.title) == MAX_TITLE_LENGTH

    def test_overlong_description(self):
        with pytest.raises(InputValidationError) as exc:
            validate_itinerary_payload(_payload(description="d" * (MAX_DESCRIPTION_LENGTH + 1)))
        assert exc.value.code == "invalid_request"

    def test_overlong_pin_title(self):
        with pytest.raises(InvalidPinTitleError) as exc:
            validate_itinerary_payload(_payload(pins=[_pin(), _pin(title="p" * (MAX_PIN_TITLE_LENGTH + 1))]))
        assert exc.value.message == "Pin 2 title must be at most 300 characters"

    def test_overlong_pin_description(self):
        with pytest.raises(InvalidPinFieldError):
            validate_itinerary_payload(_payload(pins=[_pin(description="d" * (MAX_DESCRIPTION_LENGTH + 1))]))

    def test_all_rejections_are_input_errors(self):
        with pytest.raises(InputValidationError) as exc:
            validate_itinerary_payload(_payload(title=""))
        assert exc.value.status_code == 400


class TestNormalization:

    def test_strings_are_trimmed(self):
        result = validate_itinerary_payload(_payload(
            title="  Kerala trip ",
            description="  backwaters  ",
            pins=[_pin(title="  Fort Kochi  ", description="   ")],
        ))
        assert result.title == "Kerala trip"
        assert result.description == "backwaters"
        assert result.pins[0].title == "Fort Kochi"
        assert result.pins[0].description is None

    def test_order_index_defaults_to_position(self):
        result = validate_itinerary_payload(_payload(pins=[
            _pin(title="A"), _pin(title="B", orderIndex=7), _pin(title="C"),
        ]))
        assert [p.order_index for p in result.pins] == [0, 7, 2]

    def test_is_public_defaults_to_false(self):
        assert validate_itinerary_payload(_payload()).is_public is False
        assert validate_itinerary_payload(_payload(isPublic=True)).is_public is True
        assert validate_itinerary_payload(_payload(isPublic="yes")).is_public is False

    def test_type_and_icon_are_normalized(self):
        result = validate_itinerary_payload(_payload(pins=[
            _pin(type="hotel"),
            _pin(type="RICKSHAW", icon="RICKSHAW"),
            _pin(type="unknown"),
        ]))
        assert [(p.type, p.icon) for p in result.pins] == [
            (PinType.HOTEL, PinIcon.HOTEL),
            (PinType.CUSTOM, PinIcon.PIN),
            (PinType.CUSTOM, PinIcon.PIN),
        ]

    def test_day_zero_is_absent(self):
        result = validate_itinerary_payload(_payload(pins=[_pin(day=0), _pin(day=2)]))
        assert result.pins[0].day is None
        assert result.pins[1].day == 2

    def test_iso_date_is_parsed(self):
        result = validate_itinerary_payload(_payload(pins=[_pin(date="2024-03-15T09:30:00")]))
        assert result.pins[0].date == datetime(2024, 3, 15, 9, 30)

    @pytest.mark.parametrize("value", ["2024-05-01T10:00:00.000Z", "2024-05-01T10:00:00Z", "2024-05-01T15:30:00+05:30"])
    def test_utc_and_offset_dates_are_parsed(self, value):
        result = validate_itinerary_payload(_payload(pins=[_pin(date=value)]))
        assert result.pins[0].date == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_integer_coordinates_accepted(self):
        result = validate_itinerary_payload(_payload(pins=[_pin(latitude=10, longitude=76)]))
        assert result.pins[0].latitude == 10.0
        assert result.pins[0].longitude == 76.0
