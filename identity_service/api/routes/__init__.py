"""API routes."""

from fastapi import APIRouter

from identity_service.api.routes import contacts, health, identify

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(identify.router, tags=["identify"])
api_router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
