from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Office:
    """Registered office and its check-in geofence."""

    office_id: int
    name: str
    address: str
    latitude: float
    longitude: float
    radius_meters: int
    is_active: bool = True
