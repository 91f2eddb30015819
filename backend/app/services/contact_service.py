"""
Emergency Contact Service.

Every query is keyed on (owner_id, contact_id) together, so a contact that
belongs to someone else is indistinguishable from one that does not exist.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError, ValidationFailedError
from backend.app.models.emergency_contact import EmergencyContact
from backend.app.schemas.emergency_contact import EmergencyContactCreate, EmergencyContactUpdate

logger = logging.getLogger("trailsafe.contacts")


class ContactService:

    @staticmethod
    async def list_contacts(db: AsyncSession, owner_id: int) -> List[EmergencyContact]:
        result = await db.execute(
            select(EmergencyContact)
            .where(EmergencyContact.user_id == owner_id)
            .order_by(EmergencyContact.created_at)
        )
        contacts = result.scalars().all()
        logger.info("Emergency contacts fetched", extra={"user_id": owner_id, "count": len(contacts)})
        return contacts

    @staticmethod
    async def find_owned(db: AsyncSession, owner_id: int, contact_id: str) -> Optional[EmergencyContact]:
        """Return the contact if ``owner_id`` owns it, else None."""
        result = await db.execute(
            select(EmergencyContact).where(
                EmergencyContact.id == contact_id,
                EmergencyContact.user_id == owner_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_owned(db: AsyncSession, owner_id: int, contact_id: str) -> EmergencyContact:
        contact = await ContactService.find_owned(db, owner_id, contact_id)
        if contact is None:
            logger.warning("Emergency contact not found", extra={"user_id": owner_id, "contact_id": contact_id})
            raise ResourceNotFoundError("Contact", contact_id)
        return contact

    @staticmethod
    async def create_contact(db: AsyncSession, owner_id: int, data: EmergencyContactCreate) -> EmergencyContact:
        if not data.name or not data.phone_number:
            raise ValidationFailedError("name and phoneNumber are required")

        contact = EmergencyContact(
            user_id=owner_id,
            name=data.name,
            phone_number=data.phone_number,
        )
        db.add(contact)
        await db.commit()
        await db.refresh(contact)

        logger.info("Emergency contact created", extra={"user_id": owner_id, "contact_id": contact.id})
        return contact

    @staticmethod
    async def update_contact(
        db: AsyncSession,
        owner_id: int,
        contact_id: str,
        data: EmergencyContactUpdate,
    ) -> EmergencyContact:
        contact = await ContactService.get_owned(db, owner_id, contact_id)

        # Only fields present in the request body are applied
        changes = data.model_dump(exclude_unset=True)
        for field in ("name", "phone_number"):
            if field not in changes:
                continue
            if not changes[field]:
                raise ValidationFailedError(f"{field} cannot be empty")
            setattr(contact, field, changes[field])

        await db.commit()
        await db.refresh(contact)

        logger.info("Emergency contact updated", extra={"user_id": owner_id, "contact_id": contact_id})
        return contact

    @staticmethod
    async def delete_contact(db: AsyncSession, owner_id: int, contact_id: str) -> None:
        """Delete the contact; trips and their history go with it (FK cascade)."""
        result = await db.execute(
            delete(EmergencyContact).where(
                EmergencyContact.id == contact_id,
                EmergencyContact.user_id == owner_id,
            )
        )
        if result.rowcount == 0:
            await db.rollback()
            logger.warning("Emergency contact not found", extra={"user_id": owner_id, "contact_id": contact_id})
            raise ResourceNotFoundError("Contact", contact_id)

        await db.commit()
        logger.info("Emergency contact deleted", extra={"user_id": owner_id, "contact_id": contact_id})
