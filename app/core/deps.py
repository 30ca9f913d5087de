from typing import Callable
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.db.database import get_db
from app.core.security import decode_token
from app.models.admin import Admin, AdminRole
from app.models.member import Member
from app.models.user import User, UserRole

security = HTTPBearer()

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def _payload(credentials: HTTPAuthorizationCredentials, principal_type: str) -> dict:
    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("sub") is None or payload.get("id") is None:
        raise credentials_exception
    if payload.get("type") != principal_type:
        raise credentials_exception
    return payload


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    payload = _payload(credentials, "member")
    user = db.get(User, payload["id"])
    if user is None or user.role != UserRole.MEMBER:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return user


def get_current_member(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Member:
    member = db.query(Member).filter(Member.membership_number == current_user.membership_number).first()
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member profile not found")
    return member


def get_current_admin(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Admin:
    payload = _payload(credentials, "admin")
    admin = db.get(Admin, payload["id"])
    if admin is None:
        raise credentials_exception
    if not admin.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin account is inactive")
    return admin


def require_admin_roles(*roles: AdminRole) -> Callable[..., Admin]:
    """Dependency factory: the current admin must hold one of `roles`."""
    def checker(current_admin: Admin = Depends(get_current_admin)) -> Admin:
        if current_admin.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_admin
    return checker


require_super_admin = require_admin_roles(AdminRole.SUPER_ADMIN)
require_membership_admin = require_admin_roles(AdminRole.SUPER_ADMIN, AdminRole.MEMBERSHIP_ADMIN)
