# File: app/models/member.py
from sqlalchemy import Column, String, Boolean, DateTime, Date, Enum
from sqlalchemy.sql import func
from app.models.base import BaseModel
from app.models.profile_fields import ProfessionalProfileMixin, enum_values
import enum


class MembershipType(enum.Enum):
    EXISTING = "existing"
    NEW = "new"


class Member(ProfessionalProfileMixin, BaseModel):
    __tablename__ = "members"

    # Immutable once assigned
    membership_number = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    joined_date = Column(DateTime(timezone=True), server_default=func.now())
    expiry_date = Column(Date, nullable=True)
    membership_type = Column(
        Enum(MembershipType, name="membership_type", values_callable=enum_values),
        nullable=False,
        default=MembershipType.NEW,
    )

    # Account linkage
    has_account = Column(Boolean, default=False, nullable=False)
    account_created = Column(DateTime(timezone=True), nullable=True)

    # Directory / profile
    profile_photo = Column(String(500), nullable=True)
    show_in_directory = Column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(part for part in parts if part)
