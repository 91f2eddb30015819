"""
API Router.

Aggregates all endpoints; mounted under ``/api``.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import auth, emergency_contacts, trips

router = APIRouter()

router.include_router(auth.router)
router.include_router(emergency_contacts.router)
router.include_router(trips.router)
