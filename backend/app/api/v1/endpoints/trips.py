"""
Trip Lifecycle API Endpoints.

Start / location / complete / sos transitions. Each mutation commits first,
then queues an SMS to the trip's emergency contact as a background task.
"""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import get_current_user
from backend.app.db.session import get_db
from backend.app.models.trip_enums import NotificationEvent
from backend.app.schemas.trip import (
    CoordinatesIn,
    LocationUpdateResponse,
    TripResponse,
    TripStartRequest,
)
from backend.app.services.notification_service import NotificationService
from backend.app.services.sms_dispatcher import SmsDispatcher, get_sms_dispatcher
from backend.app.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["Trips"])


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's most recent trips, newest first."""
    trips = await TripService.list_recent_trips(db, current_user["user_id"])
    return [TripResponse.from_trip(trip) for trip in trips]


@router.get("/active", response_model=Optional[TripResponse])
async def get_active_trip(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's active trip, or null."""
    trip = await TripService.get_active_trip(db, current_user["user_id"])
    return TripResponse.from_trip(trip) if trip else None


@router.post("/start", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def start_trip(
    background_tasks: BackgroundTasks,
    data: TripStartRequest = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dispatcher: SmsDispatcher = Depends(get_sms_dispatcher)
):
    """
    Start a trip.

    Validates:
    - emergencyContactId belongs to the caller (400 otherwise)
    - No other active trip for the caller (409)
    """
    trip = await TripService.start_trip(db, current_user["user_id"], data)
    NotificationService.notify_contact(background_tasks, dispatcher, trip, NotificationEvent.TRIP_START)
    return TripResponse.from_trip(trip)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: str = Path(..., description="Trip ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    trip = await TripService.get_owned(db, current_user["user_id"], trip_id)
    return TripResponse.from_trip(trip)


@router.get("/{trip_id}/locations", response_model=List[LocationUpdateResponse])
async def list_trip_locations(
    trip_id: str = Path(..., description="Trip ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Location history of a trip, oldest first."""
    locations = await TripService.list_locations(db, current_user["user_id"], trip_id)
    return [LocationUpdateResponse.from_location(location) for location in locations]


@router.put("/{trip_id}/location", response_model=TripResponse)
async def update_trip_location(
    background_tasks: BackgroundTasks,
    trip_id: str = Path(..., description="Trip ID"),
    coords: CoordinatesIn = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dispatcher: SmsDispatcher = Depends(get_sms_dispatcher)
):
    """Record the caller's position on an active trip."""
    trip = await TripService.update_location(db, current_user["user_id"], trip_id, coords)
    NotificationService.notify_contact(background_tasks, dispatcher, trip, NotificationEvent.LOCATION_UPDATE)
    return TripResponse.from_trip(trip)


@router.put("/{trip_id}/complete", response_model=TripResponse)
async def complete_trip(
    background_tasks: BackgroundTasks,
    trip_id: str = Path(..., description="Trip ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dispatcher: SmsDispatcher = Depends(get_sms_dispatcher)
):
    """Stop tracking a trip; sets endTime."""
    trip = await TripService.complete_trip(db, current_user["user_id"], trip_id)
    NotificationService.notify_contact(background_tasks, dispatcher, trip, NotificationEvent.TRIP_COMPLETE)
    return TripResponse.from_trip(trip)


@router.put("/{trip_id}/sos", response_model=TripResponse)
async def trigger_sos(
    background_tasks: BackgroundTasks,
    trip_id: str = Path(..., description="Trip ID"),
    coords: CoordinatesIn = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dispatcher: SmsDispatcher = Depends(get_sms_dispatcher)
):
    """Raise an SOS: urgent SMS with position and clothing/vehicle details."""
    trip = await TripService.trigger_sos(db, current_user["user_id"], trip_id, coords)
    NotificationService.notify_contact(background_tasks, dispatcher, trip, NotificationEvent.SOS)
    return TripResponse.from_trip(trip)
