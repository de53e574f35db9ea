from fastapi import APIRouter, Depends, HTTPException, status

from linkhub_app.config import settings
from linkhub_app.dependencies import get_admin_service, get_auth_service, require_admin
from linkhub_app.models.user import User
from linkhub_app.schemas.admin import UserListResponse
from linkhub_app.schemas.common import MessageResponse
from linkhub_app.services.admin_service import AdminService, RepairReport, SystemStats
from linkhub_app.services.auth_service import AuthService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

# Unauthenticated development helpers, refused in production
dev_router = APIRouter(prefix="/dev", tags=["dev"])


@router.get("/users", response_model=UserListResponse)
async def list_users(admin_service: AdminService = Depends(get_admin_service)):
    users = await admin_service.get_all_users()
    return UserListResponse(total=len(users), users=users)


@router.get("/stats", response_model=SystemStats)
async def system_stats(admin_service: AdminService = Depends(get_admin_service)):
    """Totals over every user and link (walks the whole dataset)"""
    return await admin_service.get_system_stats()


@router.post("/repair", response_model=RepairReport)
async def repair_key_structure(admin_service: AdminService = Depends(get_admin_service)):
    """Recreate missing indexes and profiles left by interrupted writes"""
    report = await admin_service.fix_key_structure()
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to repair key structure"
        )
    return report


@router.delete("/users/{username}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    username: str,
    admin: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    if username == admin.username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )
    if not await admin_service.clear_user_data(username):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )


@dev_router.post("/reset-db", response_model=MessageResponse)
async def reset_database(
    admin_service: AdminService = Depends(get_admin_service),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Wipe the store and recreate the admin account"""
    if settings.is_production or not settings.allow_reset_db:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not available in production"
        )

    if not await admin_service.reset_database():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reset database"
        )
    await auth_service.initialize_admin()
    return MessageResponse(message="Database reset successfully")
