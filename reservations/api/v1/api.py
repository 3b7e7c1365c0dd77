from fastapi import APIRouter
from reservations.api.v1.routes.auth import router as auth_router
from reservations.api.v1.routes.facilities import router as facilities_router
from reservations.api.v1.routes.bookings import router as bookings_router
from reservations.api.v1.routes.locations import router as locations_router
from reservations.api.v1.routes.admin import router as admin_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(facilities_router)
api_router.include_router(bookings_router)
api_router.include_router(locations_router)
api_router.include_router(admin_router)
