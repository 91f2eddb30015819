"""
SMS message builders for trip events.

Pure functions: no I/O, no clock. Coordinates are rendered with 4 fractional
digits and followed by a map link the contact can tap.
"""

from typing import Any, Optional

from backend.app.core.config import settings
from backend.app.services.coordinates import format_coordinate


def build_map_link(latitude: Any, longitude: Any, base: Optional[str] = None) -> str:
    base = base if base is not None else settings.map_link_base
    return f"{base}{format_coordinate(latitude)},{format_coordinate(longitude)}"


def _description_lines(clothing: Optional[str], vehicle: Optional[str]) -> str:
    lines = ""
    if clothing:
        lines += f"Clothing: {clothing}\n"
    if vehicle:
        lines += f"Vehicle: {vehicle}\n"
    return lines


def build_trip_start_message(
    activity_type: str,
    clothing_description: Optional[str],
    vehicle_description: Optional[str],
    latitude: Any,
    longitude: Any,
) -> str:
    lat, lng = format_coordinate(latitude), format_coordinate(longitude)
    message = "SAFETY ALERT: Trip started\n"
    message += f"Activity: {activity_type}\n"
    message += _description_lines(clothing_description, vehicle_description)
    message += f"Location: {lat}, {lng}\n"
    message += build_map_link(latitude, longitude)
    return message


def build_location_update_message(latitude: Any, longitude: Any) -> str:
    lat, lng = format_coordinate(latitude), format_coordinate(longitude)
    return f"Location update: {lat}, {lng}\n{build_map_link(latitude, longitude)}"


def build_sos_message(
    activity_type: Optional[str],
    clothing_description: Optional[str],
    vehicle_description: Optional[str],
    latitude: Any,
    longitude: Any,
) -> str:
    """Urgent alert. Always carries clothing/vehicle when the trip has them."""
    lat, lng = format_coordinate(latitude), format_coordinate(longitude)
    message = "\U0001F6A8 SOS EMERGENCY ALERT \U0001F6A8\n"
    message += "URGENT: User needs help!\n"
    if activity_type:
        message += f"Activity: {activity_type}\n"
    message += _description_lines(clothing_description, vehicle_description)
    message += f"Current Location: {lat}, {lng}\n"
    message += build_map_link(latitude, longitude)
    return message


def build_trip_complete_message() -> str:
    return "Trip completed and tracking stopped."
