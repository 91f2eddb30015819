"""
Emergency Contact database model.

A name/phone pair a user designates to receive safety notifications.
"""

import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base


class EmergencyContact(Base):
    """
    Emergency Contact model.

    Owned by exactly one user. Deleting a contact deletes every trip that
    references it (and, through the trip, its location history).
    """
    __tablename__ = "emergency_contacts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ownership
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    phone_number = Column(String(32), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    trips = relationship("Trip", back_populates="emergency_contact", passive_deletes=True)

    def __repr__(self):
        return f"<EmergencyContact(id={self.id}, user_id={self.user_id}, name='{self.name}')>"
