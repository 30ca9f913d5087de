from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app import schemas
from app.core.deps import get_current_user
from app.db.database import get_db
from app.models.user import User
from app.services.account_service import account_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=schemas.Token)
def login(login_in: schemas.LoginRequest, db: Session = Depends(get_db)) -> Any:
    """Member login with email and password"""
    return account_service.login_member(db, email=login_in.email, password=login_in.password)


@router.post("/create-account", response_model=schemas.User, status_code=201)
def create_account(account_in: schemas.CreateAccountRequest, db: Session = Depends(get_db)) -> Any:
    """Open a login for a member who was added without one"""
    return account_service.create_account(db, request=account_in)


@router.get("/me", response_model=schemas.User)
def read_current_user(current_user: User = Depends(get_current_user)) -> Any:
    return current_user


@router.post("/forgot-password", response_model=schemas.MessageResponse)
def forgot_password(request: schemas.ForgotPasswordRequest, db: Session = Depends(get_db)) -> Any:
    message = account_service.request_password_reset(db, email=request.email)
    return {"message": message}


@router.get("/verify-reset-token/{token}", response_model=schemas.TokenCheck)
def verify_reset_token(token: str, db: Session = Depends(get_db)) -> Any:
    return {"valid": account_service.verify_reset_token(db, token=token)}


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(request: schemas.ResetPasswordRequest, db: Session = Depends(get_db)) -> Any:
    email_sent = account_service.reset_password(db, token=request.token, new_password=request.new_password)
    return {
        "message": "Password has been reset successfully. You can now login with your new password.",
        "email_sent": email_sent,
    }


@router.post("/change-password", response_model=schemas.MessageResponse)
def change_password(
    request: schemas.ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    email_sent = account_service.change_password(
        db,
        principal=current_user,
        current_password=request.current_password,
        new_password=request.new_password,
    )
    return {"message": "Password changed successfully", "email_sent": email_sent}
