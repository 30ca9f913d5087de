# File: app/crud/admin.py
from typing import Any, Dict, List, Optional, Tuple, Union
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDPrincipal
from app.core.exceptions import ConflictError
from app.core.security import get_password_hash
from app.models.admin import Admin
from app.schemas.admin import AdminCreate, AdminUpdate


class CRUDAdmin(CRUDPrincipal[Admin, AdminCreate, AdminUpdate]):

    def get_multi_filtered(
        self, db: Session, *, search: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> Tuple[List[Admin], int]:
        query = db.query(Admin)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(Admin.name.ilike(term), Admin.email.ilike(term)))
        total = query.count()
        items = (
            query.order_by(Admin.created_at.desc(), Admin.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def create(self, db: Session, *, obj_in: AdminCreate, password: str, commit: bool = True) -> Admin:
        email = obj_in.email.strip().lower()
        if self.get_by_email(db, email=email):
            raise ConflictError("An admin with this email already exists")
        db_obj = Admin(
            email=email,
            name=obj_in.name,
            role=obj_in.role,
            hashed_password=get_password_hash(password),
            is_active=True,
        )
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def update(
        self, db: Session, *, db_obj: Admin, obj_in: Union[AdminUpdate, Dict[str, Any]], commit: bool = True
    ) -> Admin:
        update_data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.dict(exclude_unset=True)
        if update_data.get("email"):
            email = update_data["email"].strip().lower()
            clash = db.query(Admin.id).filter(Admin.email == email, Admin.id != db_obj.id).first()
            if clash:
                raise ConflictError("Email already in use by another admin")
            update_data["email"] = email
        return super().update(db, db_obj=db_obj, obj_in=update_data, commit=commit)


admin = CRUDAdmin(Admin)
