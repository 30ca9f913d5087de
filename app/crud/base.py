from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from app.core.security import as_utc, get_password_hash, utcnow
from app.db.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        CRUD object with default methods to Create, Read, Update, Delete (CRUD).

        **Parameters**

        * `model`: A SQLAlchemy model class

        Methods that take a `commit` flag only flush when it is False, so a
        caller can compose several of them inside one transaction.
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        return db.query(self.model).order_by(self.model.id).offset(skip).limit(limit).all()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]],
               commit: bool = True) -> ModelType:
        if isinstance(obj_in, dict):
            obj_in_data = obj_in
        else:
            obj_in_data = obj_in.dict()
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True,
    ) -> ModelType:
        columns = inspect(self.model).columns.keys()
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.dict(exclude_unset=True)
        for field in update_data:
            if field in columns:
                setattr(db_obj, field, update_data[field])
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utcnow()
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def remove(self, db: Session, *, id: int, commit: bool = True) -> Optional[ModelType]:
        obj = db.get(self.model, id)
        if obj is not None:
            db.delete(obj)
            if commit:
                db.commit()
            else:
                db.flush()
        return obj

    @staticmethod
    def _save(db: Session, db_obj: ModelType, commit: bool) -> None:
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()


class CRUDPrincipal(CRUDBase[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Shared login and password-reset bookkeeping for accounts with an email and password hash."""

    def get_by_email(self, db: Session, *, email: str) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.email == email.strip().lower()).first()

    def update_last_login(self, db: Session, *, db_obj: ModelType) -> ModelType:
        db_obj.last_login = utcnow()
        db_obj.login_count = (db_obj.login_count or 0) + 1
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_password(self, db: Session, *, db_obj: ModelType, new_password: str,
                        commit: bool = True) -> ModelType:
        db_obj.hashed_password = get_password_hash(new_password)
        db_obj.updated_at = utcnow()
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def set_reset_token(self, db: Session, *, db_obj: ModelType, token_hash: str,
                        expires_at: datetime) -> ModelType:
        db_obj.reset_password_token = token_hash
        db_obj.reset_password_expires = expires_at
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def clear_reset_token(self, db: Session, *, db_obj: ModelType, commit: bool = True) -> ModelType:
        db_obj.reset_password_token = None
        db_obj.reset_password_expires = None
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def get_by_reset_token(self, db: Session, *, token_hash: str) -> Optional[ModelType]:
        """Account holding this token hash, or None when unknown or expired."""
        db_obj = db.query(self.model).filter(self.model.reset_password_token == token_hash).first()
        if db_obj is None:
            return None
        expires_at = as_utc(db_obj.reset_password_expires)
        if expires_at is None or expires_at <= utcnow():
            return None
        return db_obj
