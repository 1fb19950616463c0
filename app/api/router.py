"""
API router setup
Public booking endpoints and admin (JWT) endpoints share one prefix;
admin routes declare the get_current_admin dependency themselves.
"""
from fastapi import APIRouter

from app.api.routes import auth, availability, bookings, services

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(services.router)
api_router.include_router(availability.router)
api_router.include_router(bookings.router)


@api_router.get("/", tags=["Info"])
async def api_info():
    """API information"""
    return {
        "version": "1.0",
        "authentication": {
            "public": "Service catalog, availability queries, booking and token-based management",
            "admin": "JWT Bearer token required (POST /api/auth/login)",
        }
    }
