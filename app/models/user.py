# File: app/models/user.py
from sqlalchemy import Column, String, Boolean, Enum, DateTime, Integer
from app.models.base import BaseModel
from app.models.profile_fields import enum_values
import enum


class UserRole(enum.Enum):
    MEMBER = "member"
    ADMIN = "admin"


class User(BaseModel):
    """Member login credential. One row per email, linked to a member by membership number."""
    __tablename__ = "users"

    membership_number = Column(String(50), index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        nullable=False,
        default=UserRole.MEMBER,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Login tracking
    last_login = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, default=0, nullable=False)

    # Password reset (only the sha256 of the emailed token is stored)
    reset_password_token = Column(String(255), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    # Email verification
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String(255), nullable=True)
