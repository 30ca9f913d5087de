from .base import BaseModel
from .application import Application, ApplicationStatus, PaymentStatus
from .member import Member, MembershipType
from .user import User, UserRole
from .admin import Admin, AdminRole
from .membership_sequence import MembershipSequenceCounter

__all__ = [
    "BaseModel", "Application", "ApplicationStatus", "PaymentStatus",
    "Member", "MembershipType", "User", "UserRole", "Admin", "AdminRole",
    "MembershipSequenceCounter",
]
