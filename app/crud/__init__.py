from .application import application
from .member import member
from .user import user
from .admin import admin
from .membership_sequence import membership_sequence

__all__ = ["application", "member", "user", "admin", "membership_sequence"]
