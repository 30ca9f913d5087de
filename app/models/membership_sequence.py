# File: app/models/membership_sequence.py
from sqlalchemy import Column, Integer
from app.models.base import BaseModel


class MembershipSequenceCounter(BaseModel):
    """Highest sequence number handed out for a calendar year."""
    __tablename__ = "membership_sequence_counters"

    year = Column(Integer, unique=True, index=True, nullable=False)
    current_number = Column(Integer, nullable=False, default=0)
