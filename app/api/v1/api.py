# File: app/api/v1/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import admin_auth, admins, applications, auth, members, profile, public

# Create main API router
api_router = APIRouter()

# Public and member-facing routes
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    applications.router,
    prefix="/applications",
    tags=["applications"]
)

api_router.include_router(
    profile.router,
    prefix="/profile",
    tags=["member-profile"]
)

api_router.include_router(
    public.router,
    prefix="/public",
    tags=["public"]
)

# Admin routes
api_router.include_router(
    admin_auth.router,
    prefix="/admin/auth",
    tags=["admin-authentication"]
)

api_router.include_router(
    applications.admin_router,
    prefix="/admin/applications",
    tags=["admin-applications"]
)

api_router.include_router(
    members.router,
    prefix="/admin/members",
    tags=["admin-members"]
)

api_router.include_router(
    admins.router,
    prefix="/admin/admins",
    tags=["admin-management"]
)
