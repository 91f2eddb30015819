"""
Emergency Contact API Endpoints.

CRUD over the caller's emergency contacts.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Body, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import get_current_user
from backend.app.db.session import get_db
from backend.app.schemas.common import SuccessResponse
from backend.app.schemas.emergency_contact import (
    EmergencyContactCreate,
    EmergencyContactResponse,
    EmergencyContactUpdate,
)
from backend.app.services.contact_service import ContactService

router = APIRouter(prefix="/emergency-contacts", tags=["Emergency Contacts"])


@router.get("", response_model=List[EmergencyContactResponse])
async def list_emergency_contacts(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's emergency contacts."""
    return await ContactService.list_contacts(db, current_user["user_id"])


@router.post("", response_model=EmergencyContactResponse, status_code=status.HTTP_201_CREATED)
async def create_emergency_contact(
    data: EmergencyContactCreate = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create an emergency contact. Both name and phoneNumber are required."""
    return await ContactService.create_contact(db, current_user["user_id"], data)


@router.put("/{contact_id}", response_model=EmergencyContactResponse)
async def update_emergency_contact(
    contact_id: str = Path(..., description="Contact ID"),
    data: EmergencyContactUpdate = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update name and/or phoneNumber. 404 if the contact is not the caller's."""
    return await ContactService.update_contact(db, current_user["user_id"], contact_id, data)


@router.delete("/{contact_id}", response_model=SuccessResponse)
async def delete_emergency_contact(
    contact_id: str = Path(..., description="Contact ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete an emergency contact.

    Trips that use this contact, and their location history, are deleted too.
    """
    await ContactService.delete_contact(db, current_user["user_id"], contact_id)
    return SuccessResponse(success=True)
