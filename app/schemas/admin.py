# File: app/schemas/admin.py
from pydantic import BaseModel, EmailStr, validator
from typing import List, Optional
from datetime import datetime
from app.models.admin import AdminRole
from app.schemas.auth import _check_length


class AdminCreate(BaseModel):
    email: EmailStr
    name: str
    role: AdminRole = AdminRole.MEMBERSHIP_ADMIN
    # Generated and emailed when omitted
    password: Optional[str] = None

    @validator("password")
    def password_length(cls, v):
        return _check_length(v) if v is not None else v

    @validator("name")
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class AdminUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: Optional[AdminRole] = None
    is_active: Optional[bool] = None


class AdminProfileUpdate(BaseModel):
    """Fields an admin may change on their own account"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @validator("name")
    def name_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v is not None else v


class Admin(BaseModel):
    id: int
    email: str
    name: str
    role: AdminRole
    is_active: bool
    last_login: Optional[datetime] = None
    login_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class AdminList(BaseModel):
    admins: List[Admin]
    total: int
    page: int
    limit: int
    total_pages: int


class AdminCreated(BaseModel):
    message: str
    admin: Admin
    email_sent: bool

