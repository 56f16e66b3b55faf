"""API v1 router aggregation."""

from fastapi import APIRouter

from pmhub.api.v1 import auth, users

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(users.router, prefix="/users", tags=["User Management"])
