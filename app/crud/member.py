# File: app/crud/member.py
import logging
from typing import Any, Dict, List, Optional, Tuple, Union
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.core.exceptions import ConflictError, NotFoundError, PersistenceError
from app.core.security import utcnow
from app.models.application import Application
from app.models.member import Member, MembershipType
from app.models.user import User
from app.schemas.member import MemberCreate, MemberUpdate

logger = logging.getLogger(__name__)

QUICK_SEARCH_LIMIT = 50

REQUIRED_COLUMNS = ("first_name", "last_name", "email", "is_active", "show_in_directory",
                    "membership_type", "has_account")


def _search_clause(search: str):
    term = f"%{search.strip()}%"
    return or_(
        Member.first_name.ilike(term),
        Member.middle_name.ilike(term),
        Member.last_name.ilike(term),
        Member.email.ilike(term),
        Member.membership_number.ilike(term),
        Member.area_of_specialty.ilike(term),
    )


class CRUDMember(CRUDBase[Member, MemberCreate, MemberUpdate]):

    def get_by_membership_number(self, db: Session, *, membership_number: str) -> Optional[Member]:
        return db.query(Member).filter(Member.membership_number == membership_number.strip()).first()

    def get_by_email(self, db: Session, *, email: str) -> Optional[Member]:
        return db.query(Member).filter(Member.email == email.strip().lower()).first()

    def create(self, db: Session, *, obj_in: Union[MemberCreate, Dict[str, Any]], commit: bool = True) -> Member:
        data = obj_in if isinstance(obj_in, dict) else obj_in.dict()
        data = {**data, "email": data["email"].strip().lower()}
        if self.get_by_email(db, email=data["email"]):
            raise ConflictError("A member with this email already exists")
        if self.get_by_membership_number(db, membership_number=data["membership_number"]):
            raise ConflictError("Membership number already exists")
        return super().create(db, obj_in=data, commit=commit)

    def get_multi_filtered(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        specialty: Optional[str] = None,
        is_active: Optional[bool] = None,
        membership_type: Optional[MembershipType] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Member], int]:
        query = db.query(Member)
        if search:
            query = query.filter(_search_clause(search))
        if specialty:
            query = query.filter(Member.area_of_specialty.ilike(f"%{specialty.strip()}%"))
        if is_active is not None:
            query = query.filter(Member.is_active == is_active)
        if membership_type is not None:
            query = query.filter(Member.membership_type == membership_type)

        total = query.count()
        items = (
            query.order_by(Member.created_at.desc(), Member.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def quick_search(self, db: Session, *, q: str) -> List[Member]:
        return (
            db.query(Member)
            .filter(_search_clause(q))
            .order_by(Member.last_name, Member.first_name)
            .limit(QUICK_SEARCH_LIMIT)
            .all()
        )

    def get_directory(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        specialty: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Member], int]:
        """Active members who opted in to the public directory."""
        query = db.query(Member).filter(Member.is_active.is_(True), Member.show_in_directory.is_(True))
        if search:
            query = query.filter(_search_clause(search))
        if specialty:
            query = query.filter(Member.area_of_specialty.ilike(f"%{specialty.strip()}%"))

        total = query.count()
        items = (
            query.order_by(Member.last_name, Member.first_name)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def get_public_profile(self, db: Session, *, membership_number: str) -> Optional[Member]:
        return (
            db.query(Member)
            .filter(
                Member.membership_number == membership_number.strip(),
                Member.is_active.is_(True),
                Member.show_in_directory.is_(True),
            )
            .first()
        )

    def get_existing_members(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Tuple[Member, Optional[bool]]]:
        """Imported members with the active flag of their credential, if any."""
        return (
            db.query(Member, User.is_active)
            .outerjoin(User, User.membership_number == Member.membership_number)
            .filter(Member.membership_type == MembershipType.EXISTING)
            .order_by(Member.created_at.desc(), Member.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def update(
        self,
        db: Session,
        *,
        db_obj: Member,
        obj_in: Union[MemberUpdate, Dict[str, Any]],
        commit: bool = True,
    ) -> Member:
        """Apply only the fields present in `obj_in`. A new email must not belong to another member."""
        update_data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.dict(exclude_unset=True)
        # Membership numbers never change once assigned
        update_data.pop("membership_number", None)
        # An explicit null cannot clear a required column
        for key in REQUIRED_COLUMNS:
            if key in update_data and update_data[key] is None:
                del update_data[key]

        new_email = update_data.get("email")
        if new_email is not None:
            new_email = new_email.strip().lower()
            update_data["email"] = new_email
            clash = (
                db.query(Member.id)
                .filter(Member.email == new_email, Member.id != db_obj.id)
                .first()
            )
            if clash:
                raise ConflictError("Email already in use by another member")

        if new_email is not None and new_email != db_obj.email:
            # The login follows the member's email
            credential_clash = (
                db.query(User.id)
                .filter(User.email == new_email, User.membership_number != db_obj.membership_number)
                .first()
            )
            if credential_clash:
                raise ConflictError("Email already in use by another account")
            credential = db.query(User).filter(User.membership_number == db_obj.membership_number).first()
            if credential is not None:
                credential.email = new_email
                credential.updated_at = utcnow()
                db.add(credential)
                logger.info(f"Login email for member {db_obj.membership_number} changed with the member record")

        return super().update(db, db_obj=db_obj, obj_in=update_data, commit=commit)

    def toggle_active(self, db: Session, *, db_obj: Member) -> Member:
        return self.update(db, db_obj=db_obj, obj_in={"is_active": not db_obj.is_active})

    def mark_account_created(self, db: Session, *, db_obj: Member, commit: bool = True) -> Member:
        return self.update(
            db, db_obj=db_obj, obj_in={"has_account": True, "account_created": utcnow()}, commit=commit
        )

    def remove_with_dependents(self, db: Session, *, id: int) -> Member:
        """
        Hard delete a member together with its credential and application(s).

        Dependents are matched on the membership number first and the email
        second, all within one transaction.
        """
        db_obj = self.get(db, id=id)
        if db_obj is None:
            raise NotFoundError("Member not found")

        number, email = db_obj.membership_number, db_obj.email
        try:
            users_deleted = (
                db.query(User)
                .filter(or_(User.membership_number == number, User.email == email))
                .delete(synchronize_session="fetch")
            )
            applications_deleted = (
                db.query(Application)
                .filter(
                    or_(
                        Application.membership_number == number,
                        Application.email == email,
                    )
                )
                .delete(synchronize_session="fetch")
            )
            db.delete(db_obj)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to delete member {number}")
            raise PersistenceError(internal=str(e))

        logger.info(
            f"Deleted member {number} with {users_deleted} credential(s) "
            f"and {applications_deleted} application(s)"
        )
        return db_obj


member = CRUDMember(Member)
