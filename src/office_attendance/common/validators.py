from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.constants import MAX_LATITUDE, MAX_LONGITUDE, MIN_LATITUDE, MIN_LONGITUDE, NOTES_MAX_LENGTH
from ..core.exceptions import ValidationError


def require_present(payload: Mapping[str, Any], field_name: str, message: str) -> Any:
    value = payload.get(field_name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message)
    return value


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer.")


def require_number_between(value: Any, field_name: str, low: float, high: float) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number.")
    if number != number or not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}.")
    return number


def optional_notes(value: Any, *, max_length: int = NOTES_MAX_LENGTH) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Notes must be text.")
    if len(value) > max_length:
        raise ValidationError(f"Notes cannot exceed {max_length} characters.")
    return value


@dataclass(frozen=True)
class CheckInRequest:
    office_id: int
    latitude: float
    longitude: float
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, notes_max_length: int = NOTES_MAX_LENGTH) -> "CheckInRequest":
        office_id = require_present(payload, "office_id", "Office is required.")
        lat = require_present(payload, "latitude", "Location access is required for check-in.")
        lng = require_present(payload, "longitude", "Location access is required for check-in.")
        return cls(
            office_id=require_int(office_id, "Office"),
            latitude=require_number_between(lat, "Latitude", MIN_LATITUDE, MAX_LATITUDE),
            longitude=require_number_between(lng, "Longitude", MIN_LONGITUDE, MAX_LONGITUDE),
            notes=optional_notes(payload.get("notes"), max_length=notes_max_length),
        )


@dataclass(frozen=True)
class CheckOutRequest:
    latitude: float
    longitude: float
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, notes_max_length: int = NOTES_MAX_LENGTH) -> "CheckOutRequest":
        lat = require_present(payload, "latitude", "Location access is required for check-out.")
        lng = require_present(payload, "longitude", "Location access is required for check-out.")
        return cls(
            latitude=require_number_between(lat, "Latitude", MIN_LATITUDE, MAX_LATITUDE),
            longitude=require_number_between(lng, "Longitude", MIN_LONGITUDE, MAX_LONGITUDE),
            notes=optional_notes(payload.get("notes"), max_length=notes_max_length),
        )
