"""
Location Update database model.

Append-only breadcrumb trail for a trip. Rows are never modified; they go
away only with their trip.
"""

import uuid

from sqlalchemy import Column, String, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from backend.app.db.session import Base


class LocationUpdate(Base):
    __tablename__ = "location_updates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    trip_id = Column(String(36), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)

    latitude = Column(Numeric(10, 8), nullable=False)
    longitude = Column(Numeric(11, 8), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    trip = relationship("Trip", back_populates="location_updates")

    def __repr__(self):
        return f"<LocationUpdate(trip_id={self.trip_id}, lat={self.latitude}, lng={self.longitude})>"
