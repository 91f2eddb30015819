"""
Trip database model.

A tracked outdoor activity with a single designated emergency contact.
"""

import uuid

from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Enum, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.trip_enums import TripStatus


class Trip(Base):
    """
    Trip model.

    Coordinates are fixed-point with 8 fractional digits. The start position
    lives on the row itself; later positions go to ``location_updates``.
    """
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ownership
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    emergency_contact_id = Column(
        String(36),
        ForeignKey("emergency_contacts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Activity details
    activity_type = Column(String(50), nullable=False)
    clothing_description = Column(Text, nullable=True)
    vehicle_description = Column(Text, nullable=True)

    # Status
    status = Column(
        Enum(TripStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=16),
        default=TripStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    # Timing
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)

    # Position
    start_latitude = Column(Numeric(10, 8), nullable=False)
    start_longitude = Column(Numeric(11, 8), nullable=False)
    last_latitude = Column(Numeric(10, 8), nullable=False)
    last_longitude = Column(Numeric(11, 8), nullable=False)
    last_location_update = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    emergency_contact = relationship("EmergencyContact", back_populates="trips", lazy="joined")
    location_updates = relationship(
        "LocationUpdate",
        back_populates="trip",
        passive_deletes=True,
        order_by="LocationUpdate.timestamp",
    )

    def __repr__(self):
        return f"<Trip(id={self.id}, activity='{self.activity_type}', status='{self.status.value}')>"
