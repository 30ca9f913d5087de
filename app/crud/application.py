# File: app/crud/application.py
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.core.exceptions import ConflictError
from app.core.security import utcnow
from app.models.application import Application, ApplicationStatus
from app.schemas.application import ApplicationCreate, ApplicationStatusUpdate


class CRUDApplication(CRUDBase[Application, ApplicationCreate, ApplicationStatusUpdate]):

    def get_by_email(self, db: Session, *, email: str) -> Optional[Application]:
        return db.query(Application).filter(Application.email == email.strip().lower()).first()

    def get_multi_by_status(
        self, db: Session, *, status: Optional[ApplicationStatus] = None, skip: int = 0, limit: int = 100
    ) -> List[Application]:
        """Applications newest first, optionally filtered by status."""
        query = db.query(Application)
        if status is not None:
            query = query.filter(Application.status == status)
        return (
            query.order_by(Application.created_at.desc(), Application.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create(self, db: Session, *, obj_in: ApplicationCreate, commit: bool = True) -> Application:
        if self.get_by_email(db, email=obj_in.email):
            raise ConflictError("An application with this email already exists")

        db_obj = Application(
            **obj_in.dict(),
            status=ApplicationStatus.PENDING,
        )
        db.add(db_obj)
        try:
            self._save(db, db_obj, commit)
        except IntegrityError:
            # Lost a race with a concurrent submission for the same email
            db.rollback()
            raise ConflictError("An application with this email already exists")
        return db_obj

    def transition_status(
        self,
        db: Session,
        *,
        id: int,
        from_status: ApplicationStatus,
        to_status: ApplicationStatus,
        reviewed_by: Optional[int] = None,
        notes: Optional[str] = None,
        membership_number: Optional[str] = None,
    ) -> bool:
        """
        Conditional status write: only succeeds while the row still has
        `from_status`. The affected row count decides the winner when two
        reviewers act on the same application at once. Flushes, never commits.
        """
        values = {
            Application.status: to_status,
            Application.reviewed_by: reviewed_by,
            Application.reviewed_at: utcnow(),
            Application.admin_notes: notes,
            Application.updated_at: utcnow(),
        }
        if membership_number is not None:
            values[Application.membership_number] = membership_number

        updated = (
            db.query(Application)
            .filter(Application.id == id, Application.status == from_status)
            .update(values, synchronize_session="fetch")
        )
        return updated == 1

    def attach_membership_number(self, db: Session, *, id: int, membership_number: str) -> bool:
        updated = (
            db.query(Application)
            .filter(Application.id == id)
            .update({Application.membership_number: membership_number}, synchronize_session="fetch")
        )
        return updated == 1


application = CRUDApplication(Application)
