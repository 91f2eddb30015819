"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    ACTIVE = "active"  # Tracking in progress
    COMPLETED = "completed"  # User finished the trip (terminal)
    SOS = "sos"  # User signalled an emergency (terminal)


class NotificationEvent(str, enum.Enum):
    """Trip events that produce an SMS to the emergency contact."""
    TRIP_START = "trip_start"
    LOCATION_UPDATE = "location_update"
    TRIP_COMPLETE = "trip_complete"
    SOS = "sos"
