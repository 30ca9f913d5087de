# File: app/models/admin.py
from sqlalchemy import Column, String, Boolean, Enum, DateTime, Integer
from app.models.base import BaseModel
from app.models.profile_fields import enum_values
import enum


class AdminRole(enum.Enum):
    SUPER_ADMIN = "super_admin"
    MEMBERSHIP_ADMIN = "membership_admin"
    CONTENT_ADMIN = "content_admin"


class Admin(BaseModel):
    __tablename__ = "admins"

    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(
        Enum(AdminRole, name="admin_role", values_callable=enum_values),
        nullable=False,
        default=AdminRole.MEMBERSHIP_ADMIN,
    )
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, default=0, nullable=False)
    reset_password_token = Column(String(255), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)
