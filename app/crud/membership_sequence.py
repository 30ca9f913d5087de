# File: app/crud/membership_sequence.py
import logging
import re
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AllocationError
from app.core.security import utcnow
from app.models.member import Member
from app.models.membership_sequence import MembershipSequenceCounter

logger = logging.getLogger(__name__)

# Numbers already taken by imported members are skipped, up to this many in a row
MAX_ALLOCATION_ATTEMPTS = 50


class CRUDMembershipSequence:
    """Year-scoped membership number allocator backed by one counter row per year."""

    def __init__(self, prefix: Optional[str] = None, padding: Optional[int] = None,
                 max_attempts: int = MAX_ALLOCATION_ATTEMPTS):
        self.prefix = prefix or settings.MEMBERSHIP_NUMBER_PREFIX
        self.padding = padding or settings.MEMBERSHIP_SEQUENCE_PADDING
        self.max_attempts = max_attempts
        # Accepts both "NAUS-2025007" and the legacy bare "2025007"
        self.pattern = re.compile(rf"^(?:{re.escape(self.prefix)}-)?(\d{{4}})(\d+)$")

    def format_number(self, year: int, sequence: int) -> str:
        return f"{self.prefix}-{year}{sequence:0{self.padding}d}"

    def parse_number(self, number: Optional[str]):
        """Return (year, sequence) for a membership number, or None if it is not in a known format."""
        if not number:
            return None
        match = self.pattern.match(number.strip())
        if not match:
            return None
        return int(match.group(1)), int(match.group(2))

    def get_counter(self, db: Session, *, year: int) -> Optional[MembershipSequenceCounter]:
        return db.query(MembershipSequenceCounter).filter(MembershipSequenceCounter.year == year).first()

    def highest_existing_sequence(self, db: Session, *, year: int) -> int:
        """Highest suffix among members' numbers for the given year (0 if none)."""
        rows = (
            db.query(Member.membership_number)
            .filter(
                or_(
                    Member.membership_number.like(f"{self.prefix}-{year}%"),
                    Member.membership_number.like(f"{year}%"),
                )
            )
            .all()
        )
        highest = 0
        for (number,) in rows:
            parsed = self.parse_number(number)
            if parsed and parsed[0] == year:
                highest = max(highest, parsed[1])
        return highest

    def is_taken(self, db: Session, *, year: int, sequence: int) -> bool:
        candidates = [self.format_number(year, sequence), f"{year}{sequence:0{self.padding}d}"]
        return db.query(Member.id).filter(Member.membership_number.in_(candidates)).first() is not None

    def _ensure_counter(self, db: Session, *, year: int) -> None:
        if self.get_counter(db, year=year) is not None:
            return
        seed = self.highest_existing_sequence(db, year=year)
        try:
            with db.begin_nested():
                db.add(MembershipSequenceCounter(year=year, current_number=seed))
            logger.info(f"Created membership sequence counter for {year} starting at {seed}")
        except IntegrityError:
            # Another transaction created the row first; its value wins
            logger.info(f"Membership sequence counter for {year} created concurrently")

    def next_sequence(self, db: Session, *, year: int) -> int:
        """
        Atomically increment the year's counter and return the new value.

        The UPDATE takes the row lock, so concurrent allocations queue on it and
        each sees a distinct value. The lock is held until the caller's
        transaction ends.
        """
        increment = {MembershipSequenceCounter.current_number: MembershipSequenceCounter.current_number + 1}
        updated = (
            db.query(MembershipSequenceCounter)
            .filter(MembershipSequenceCounter.year == year)
            .update(increment, synchronize_session=False)
        )
        if updated == 0:
            self._ensure_counter(db, year=year)
            updated = (
                db.query(MembershipSequenceCounter)
                .filter(MembershipSequenceCounter.year == year)
                .update(increment, synchronize_session=False)
            )
            if updated == 0:
                raise AllocationError(internal=f"No sequence counter row for {year}")

        return (
            db.query(MembershipSequenceCounter.current_number)
            .filter(MembershipSequenceCounter.year == year)
            .scalar()
        )

    def allocate(self, db: Session, *, year: Optional[int] = None) -> str:
        """
        Reserve the next membership number for the year (current year by default).

        Runs inside the caller's transaction and does not commit. Rolling the
        transaction back releases the number again.
        """
        year = year or utcnow().year
        try:
            for _ in range(self.max_attempts):
                sequence = self.next_sequence(db, year=year)
                if not self.is_taken(db, year=year, sequence=sequence):
                    number = self.format_number(year, sequence)
                    logger.info(f"Allocated membership number {number}")
                    return number
                logger.warning(f"Membership sequence {year}/{sequence} already in use, skipping")
        except SQLAlchemyError as e:
            logger.exception("Membership number allocation failed")
            raise AllocationError(internal=str(e))

        raise AllocationError(internal=f"Gave up after {self.max_attempts} taken numbers for {year}")


membership_sequence = CRUDMembershipSequence()
