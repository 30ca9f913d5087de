from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core.deps import get_current_admin
from app.db.database import get_db
from app.models.admin import Admin
from app.services.account_service import account_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=schemas.Token)
def admin_login(login_in: schemas.LoginRequest, db: Session = Depends(get_db)) -> Any:
    return account_service.login_admin(db, email=login_in.email, password=login_in.password)


@router.get("/me", response_model=schemas.Admin)
def read_current_admin(current_admin: Admin = Depends(get_current_admin)) -> Any:
    return current_admin


@router.put("/me", response_model=schemas.Admin)
def update_current_admin(
    profile_in: schemas.AdminProfileUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
) -> Any:
    """Change the signed-in admin's own name or email"""
    update_data = {key: value for key, value in profile_in.dict(exclude_unset=True).items() if value is not None}
    admin = crud.admin.update(db, db_obj=current_admin, obj_in=update_data)
    logger.info(f"Admin {admin.id} updated own profile fields: {sorted(update_data)}")
    return admin


@router.post("/forgot-password", response_model=schemas.MessageResponse)
def admin_forgot_password(request: schemas.ForgotPasswordRequest, db: Session = Depends(get_db)) -> Any:
    return {"message": account_service.request_password_reset(db, email=request.email, admin=True)}


@router.get("/verify-reset-token/{token}", response_model=schemas.TokenCheck)
def admin_verify_reset_token(token: str, db: Session = Depends(get_db)) -> Any:
    return {"valid": account_service.verify_reset_token(db, token=token, admin=True)}


@router.post("/reset-password", response_model=schemas.MessageResponse)
def admin_reset_password(request: schemas.ResetPasswordRequest, db: Session = Depends(get_db)) -> Any:
    email_sent = account_service.reset_password(
        db, token=request.token, new_password=request.new_password, admin=True
    )
    return {"message": "Password has been reset successfully", "email_sent": email_sent}


@router.post("/change-password", response_model=schemas.MessageResponse)
def admin_change_password(
    request: schemas.ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
) -> Any:
    email_sent = account_service.change_password(
        db,
        principal=current_admin,
        current_password=request.current_password,
        new_password=request.new_password,
    )
    return {"message": "Password changed successfully", "email_sent": email_sent}
