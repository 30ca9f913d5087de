# File: app/models/application.py
from sqlalchemy import Column, String, Text, Integer, DateTime, Enum
from app.models.base import BaseModel
from app.models.profile_fields import ProfessionalProfileMixin, enum_values
import enum


class ApplicationStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNDER_REVIEW = "under_review"


class PaymentStatus(enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    NOT_PAID = "not_paid"


class Application(ProfessionalProfileMixin, BaseModel):
    __tablename__ = "applications"

    email = Column(String(255), unique=True, index=True, nullable=False)

    status = Column(
        Enum(ApplicationStatus, name="application_status", values_callable=enum_values),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    payment_status = Column(
        Enum(PaymentStatus, name="payment_status", values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.NOT_PAID,
    )

    # Review trail
    reviewed_by = Column(Integer, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    admin_notes = Column(Text, nullable=True)

    # Assigned at approval
    membership_number = Column(String(50), nullable=True, index=True)
