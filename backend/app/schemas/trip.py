"""
Trip lifecycle schemas.

Coordinates come in as decimal strings (plain numbers are accepted too) and
go out as strings formatted to 4 fractional digits.
"""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import Field

from backend.app.models.trip import Trip
from backend.app.models.location_update import LocationUpdate
from backend.app.schemas.common import CamelModel, UtcDatetime
from backend.app.services.coordinates import format_coordinate

Latitude = Annotated[Decimal, Field(ge=-90, le=90, description="Latitude in decimal degrees")]
Longitude = Annotated[Decimal, Field(ge=-180, le=180, description="Longitude in decimal degrees")]


class CoordinatesIn(CamelModel):
    """Body of PUT /api/trips/{id}/location and /sos."""
    latitude: Latitude
    longitude: Longitude


class TripStartRequest(CamelModel):
    """Body of POST /api/trips/start."""
    emergency_contact_id: str = Field(..., min_length=1)
    activity_type: str = Field(..., min_length=1, max_length=50, description="hiking, biking, horseback, utv, ...")
    clothing_description: Optional[str] = Field(None, max_length=500)
    vehicle_description: Optional[str] = Field(None, max_length=500)
    latitude: Latitude
    longitude: Longitude


class ContactSummary(CamelModel):
    name: str
    phone_number: str


class TripResponse(CamelModel):
    """Trip projection returned by every trip endpoint."""
    id: str
    activity_type: str
    clothing_description: Optional[str] = None
    vehicle_description: Optional[str] = None
    start_time: UtcDatetime
    end_time: Optional[UtcDatetime] = None
    status: str
    start_latitude: str
    start_longitude: str
    last_latitude: str
    last_longitude: str
    last_location_update: UtcDatetime
    emergency_contact: ContactSummary

    @classmethod
    def from_trip(cls, trip: Trip) -> "TripResponse":
        contact = trip.emergency_contact
        return cls(
            id=trip.id,
            activity_type=trip.activity_type,
            clothing_description=trip.clothing_description,
            vehicle_description=trip.vehicle_description,
            start_time=trip.start_time,
            end_time=trip.end_time,
            status=trip.status.value,
            start_latitude=format_coordinate(trip.start_latitude),
            start_longitude=format_coordinate(trip.start_longitude),
            last_latitude=format_coordinate(trip.last_latitude),
            last_longitude=format_coordinate(trip.last_longitude),
            last_location_update=trip.last_location_update,
            emergency_contact=ContactSummary(name=contact.name, phone_number=contact.phone_number),
        )


class LocationUpdateResponse(CamelModel):
    id: str
    trip_id: str
    latitude: str
    longitude: str
    timestamp: UtcDatetime

    @classmethod
    def from_location(cls, location: LocationUpdate) -> "LocationUpdateResponse":
        return cls(
            id=location.id,
            trip_id=location.trip_id,
            latitude=format_coordinate(location.latitude),
            longitude=format_coordinate(location.longitude),
            timestamp=location.timestamp,
        )
