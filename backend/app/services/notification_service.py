"""
Notification Service.

Turns a trip event into an SMS for the trip's emergency contact and queues
it on the response's background tasks. The message is rendered up front so
the task does not touch the ORM object after the session is gone.
"""

import logging

from fastapi import BackgroundTasks

from backend.app.models.trip import Trip
from backend.app.models.trip_enums import NotificationEvent
from backend.app.services import notification_formatter as formatter
from backend.app.services.sms_dispatcher import SmsDispatcher

logger = logging.getLogger("trailsafe.notifications")


class NotificationService:

    @staticmethod
    def build_message(event: NotificationEvent, trip: Trip) -> str:
        """Render the SMS body for ``event`` at the trip's last known position."""
        lat, lng = trip.last_latitude, trip.last_longitude

        if event == NotificationEvent.TRIP_START:
            return formatter.build_trip_start_message(
                trip.activity_type, trip.clothing_description, trip.vehicle_description, lat, lng
            )
        if event == NotificationEvent.LOCATION_UPDATE:
            return formatter.build_location_update_message(lat, lng)
        if event == NotificationEvent.SOS:
            return formatter.build_sos_message(
                trip.activity_type, trip.clothing_description, trip.vehicle_description, lat, lng
            )
        if event == NotificationEvent.TRIP_COMPLETE:
            return formatter.build_trip_complete_message()
        raise ValueError(f"Unknown notification event: {event}")

    @staticmethod
    def notify_contact(
        background_tasks: BackgroundTasks,
        dispatcher: SmsDispatcher,
        trip: Trip,
        event: NotificationEvent,
    ) -> str:
        """
        Queue the SMS for ``event`` after the response is sent.

        Returns the message body (handy for logging and tests).
        """
        message = NotificationService.build_message(event, trip)
        phone_number = trip.emergency_contact.phone_number
        background_tasks.add_task(dispatcher.send, phone_number, message)
        logger.info(
            "Notification queued",
            extra={"trip_id": trip.id, "event": event.value, "to_number": phone_number},
        )
        return message
