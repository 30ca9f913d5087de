# File: app/crud/user.py
from typing import Any, Dict, Optional, Union
from sqlalchemy.orm import Session
from app.crud.base import CRUDPrincipal
from app.core.exceptions import ConflictError
from app.core.security import get_password_hash
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDPrincipal[User, UserCreate, UserUpdate]):
    """Member credentials: one row per email, linked to a member by membership number."""

    def get_by_membership_number(self, db: Session, *, membership_number: str) -> Optional[User]:
        return db.query(User).filter(User.membership_number == membership_number.strip()).first()

    def create(self, db: Session, *, obj_in: Union[UserCreate, Dict[str, Any]], commit: bool = True) -> User:
        data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.dict()
        email = data["email"].strip().lower()
        if self.get_by_email(db, email=email):
            raise ConflictError("An account with this email already exists")

        db_obj = User(
            email=email,
            membership_number=data["membership_number"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            hashed_password=get_password_hash(data["password"]),
            role=data.get("role") or UserRole.MEMBER,
            is_active=data.get("is_active", True),
        )
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def update(
        self, db: Session, *, db_obj: User, obj_in: Union[UserUpdate, Dict[str, Any]], commit: bool = True
    ) -> User:
        if isinstance(obj_in, dict):
            update_data = dict(obj_in)
        else:
            update_data = obj_in.dict(exclude_unset=True)
        if "password" in update_data:
            hashed_password = get_password_hash(update_data["password"])
            del update_data["password"]
            update_data["hashed_password"] = hashed_password
        return super().update(db, db_obj=db_obj, obj_in=update_data, commit=commit)

    def deactivate_by_email(self, db: Session, *, email: str, commit: bool = True) -> Optional[User]:
        db_obj = self.get_by_email(db, email=email)
        if db_obj is not None and db_obj.is_active:
            db_obj = self.update(db, db_obj=db_obj, obj_in={"is_active": False}, commit=commit)
        return db_obj


user = CRUDUser(User)
