from datetime import date, datetime

import pytest

from office_attendance.common.datetime_utils import month_bounds, parse_month, whole_minutes_between
from office_attendance.common.validators import CheckInRequest, CheckOutRequest
from office_attendance.core.exceptions import ValidationError


def test_check_in_request_parses_valid_payload():
    req = CheckInRequest.from_payload(
        {"office_id": "3", "latitude": "-6.2088", "longitude": 106.8456, "notes": "hi"}
    )

    assert req.office_id == 3
    assert req.latitude == pytest.approx(-6.2088)
    assert req.longitude == pytest.approx(106.8456)
    assert req.notes == "hi"


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"latitude": 0, "longitude": 0}, "Office is required."),
        ({"office_id": 1, "longitude": 0}, "Location access is required for check-in."),
        ({"office_id": 1, "latitude": 0}, "Location access is required for check-in."),
        ({"office_id": "abc", "latitude": 0, "longitude": 0}, "Office must be an integer."),
        ({"office_id": 1, "latitude": 90.5, "longitude": 0}, "Latitude must be between -90 and 90."),
        ({"office_id": 1, "latitude": 0, "longitude": -180.1}, "Longitude must be between -180 and 180."),
        ({"office_id": 1, "latitude": "north", "longitude": 0}, "Latitude must be a number."),
    ],
)
def test_check_in_request_rejects_bad_payload(payload, message):
    with pytest.raises(ValidationError) as exc:
        CheckInRequest.from_payload(payload)
    assert str(exc.value) == message


def test_range_edges_are_accepted():
    req = CheckOutRequest.from_payload({"latitude": -90, "longitude": 180})
    assert (req.latitude, req.longitude) == (-90.0, 180.0)
    assert req.notes is None


def test_notes_length_limit():
    CheckOutRequest.from_payload({"latitude": 0, "longitude": 0, "notes": "x" * 500})

    with pytest.raises(ValidationError, match="500 characters"):
        CheckOutRequest.from_payload({"latitude": 0, "longitude": 0, "notes": "x" * 501})


def test_check_out_requires_location():
    with pytest.raises(ValidationError, match="check-out"):
        CheckOutRequest.from_payload({"latitude": 1.0})


def test_month_helpers():
    assert parse_month("2024-02") == date(2024, 2, 1)
    assert month_bounds(date(2024, 2, 17)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_whole_minutes_floor_and_never_negative():
    start = datetime(2024, 1, 1, 8, 0, 0)
    assert whole_minutes_between(start, datetime(2024, 1, 1, 10, 5, 59)) == 125
    assert whole_minutes_between(start, datetime(2024, 1, 1, 7, 59)) == 0
