"""
Trip Lifecycle Service.

Owns the trip state machine::

    active --complete--> completed
    active --sos-------> sos

Each mutation is committed before its notification is queued, so an SMS
failure can never undo or block the state change. Lookups always filter by
owner and trip id together.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import (
    ActiveTripExistsError,
    ResourceNotFoundError,
    TripStateError,
    ValidationFailedError,
)
from backend.app.models.location_update import LocationUpdate
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import TripStatus
from backend.app.schemas.trip import CoordinatesIn, TripStartRequest
from backend.app.services.contact_service import ContactService
from backend.app.services.coordinates import quantize_coordinate

logger = logging.getLogger("trailsafe.trips")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TripService:

    @staticmethod
    async def find_owned(db: AsyncSession, owner_id: int, trip_id: str) -> Optional[Trip]:
        result = await db.execute(
            select(Trip).where(Trip.id == trip_id, Trip.user_id == owner_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_owned(db: AsyncSession, owner_id: int, trip_id: str) -> Trip:
        trip = await TripService.find_owned(db, owner_id, trip_id)
        if trip is None:
            logger.warning("Trip not found", extra={"user_id": owner_id, "trip_id": trip_id})
            raise ResourceNotFoundError("Trip", trip_id)
        return trip

    @staticmethod
    async def get_active_trip(db: AsyncSession, owner_id: int) -> Optional[Trip]:
        result = await db.execute(
            select(Trip)
            .where(Trip.user_id == owner_id, Trip.status == TripStatus.ACTIVE)
            .order_by(Trip.start_time.desc())
            .limit(1)
        )
        trip = result.scalar_one_or_none()
        if trip is None:
            logger.info("No active trip found", extra={"user_id": owner_id})
        return trip

    @staticmethod
    async def list_recent_trips(db: AsyncSession, owner_id: int, limit: Optional[int] = None) -> List[Trip]:
        """Newest first, bounded by ``recent_trips_limit``."""
        result = await db.execute(
            select(Trip)
            .where(Trip.user_id == owner_id)
            .order_by(Trip.start_time.desc(), Trip.created_at.desc())
            .limit(limit or settings.recent_trips_limit)
        )
        trips = result.scalars().all()
        logger.info("Trips fetched", extra={"user_id": owner_id, "count": len(trips)})
        return trips

    @staticmethod
    async def list_locations(db: AsyncSession, owner_id: int, trip_id: str) -> List[LocationUpdate]:
        """Location history of an owned trip, oldest first."""
        trip = await TripService.get_owned(db, owner_id, trip_id)
        result = await db.execute(
            select(LocationUpdate)
            .where(LocationUpdate.trip_id == trip.id)
            .order_by(LocationUpdate.timestamp)
        )
        return result.scalars().all()

    @staticmethod
    async def start_trip(db: AsyncSession, owner_id: int, data: TripStartRequest) -> Trip:
        """
        Start tracking a new trip.

        Raises:
            ValidationFailedError: contact missing or owned by someone else
            ActiveTripExistsError: caller already has an active trip
        """
        contact = await ContactService.find_owned(db, owner_id, data.emergency_contact_id)
        if contact is None:
            logger.warning(
                "Emergency contact not found",
                extra={"user_id": owner_id, "contact_id": data.emergency_contact_id},
            )
            raise ValidationFailedError("Emergency contact not found")

        if settings.enforce_single_active_trip:
            active = await TripService.get_active_trip(db, owner_id)
            if active is not None:
                raise ActiveTripExistsError(active.id)

        now = _utcnow()
        latitude = quantize_coordinate(data.latitude)
        longitude = quantize_coordinate(data.longitude)

        trip = Trip(
            user_id=owner_id,
            emergency_contact_id=contact.id,
            activity_type=data.activity_type,
            clothing_description=data.clothing_description or None,
            vehicle_description=data.vehicle_description or None,
            status=TripStatus.ACTIVE,
            start_time=now,
            start_latitude=latitude,
            start_longitude=longitude,
            last_latitude=latitude,
            last_longitude=longitude,
            last_location_update=now,
            created_at=now,
        )
        trip.emergency_contact = contact
        db.add(trip)
        await db.commit()

        logger.info(
            "Trip started",
            extra={"user_id": owner_id, "trip_id": trip.id, "activity_type": trip.activity_type},
        )
        return trip

    @staticmethod
    async def update_location(db: AsyncSession, owner_id: int, trip_id: str, coords: CoordinatesIn) -> Trip:
        """Append a history row and move the trip's last-known position. Active trips only."""
        trip = await TripService.get_owned(db, owner_id, trip_id)

        if trip.status != TripStatus.ACTIVE:
            logger.warning(
                "Trip is not active",
                extra={"user_id": owner_id, "trip_id": trip_id, "status": trip.status.value},
            )
            raise TripStateError("Trip is not active", trip.status.value)

        TripService._record_position(db, trip, coords)
        await db.commit()

        logger.info("Trip location updated", extra={"user_id": owner_id, "trip_id": trip_id})
        return trip

    @staticmethod
    async def complete_trip(db: AsyncSession, owner_id: int, trip_id: str) -> Trip:
        """
        Stop tracking.

        An active trip becomes completed. An SOS trip keeps its sos status
        (terminal) and only gets its end time. Completing twice is refused.
        """
        trip = await TripService.get_owned(db, owner_id, trip_id)

        if trip.status == TripStatus.COMPLETED:
            raise TripStateError("Trip is already completed", trip.status.value)

        if trip.status == TripStatus.ACTIVE:
            trip.status = TripStatus.COMPLETED
        trip.end_time = _utcnow()
        await db.commit()

        logger.info(
            "Trip completed",
            extra={"user_id": owner_id, "trip_id": trip_id, "status": trip.status.value},
        )
        return trip

    @staticmethod
    async def trigger_sos(db: AsyncSession, owner_id: int, trip_id: str, coords: CoordinatesIn) -> Trip:
        """
        Raise an SOS with the caller's current position.

        Allowed while active, and again while already in sos (repeat alert
        with a fresh position). A completed trip cannot raise an SOS.
        """
        trip = await TripService.get_owned(db, owner_id, trip_id)

        if trip.status == TripStatus.COMPLETED:
            raise TripStateError("Trip is already completed", trip.status.value)

        TripService._record_position(db, trip, coords)
        trip.status = TripStatus.SOS
        await db.commit()

        logger.warning("SOS triggered", extra={"user_id": owner_id, "trip_id": trip_id})
        return trip

    @staticmethod
    def _record_position(db: AsyncSession, trip: Trip, coords: CoordinatesIn) -> None:
        now = _utcnow()
        latitude = quantize_coordinate(coords.latitude)
        longitude = quantize_coordinate(coords.longitude)

        db.add(LocationUpdate(trip_id=trip.id, latitude=latitude, longitude=longitude, timestamp=now))
        trip.last_latitude = latitude
        trip.last_longitude = longitude
        trip.last_location_update = now
