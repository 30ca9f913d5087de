from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core.deps import require_super_admin
from app.db.database import get_db
from app.models.admin import Admin
from app.schemas.member import total_pages
from app.services.admin_service import admin_service

router = APIRouter()


@router.get("", response_model=schemas.AdminList)
def list_admins(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_super_admin),
) -> Any:
    admins, total = crud.admin.get_multi_filtered(db, search=search, page=page, limit=limit)
    return {
        "admins": admins,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages(total, limit),
    }


@router.get("/{admin_id}", response_model=schemas.Admin)
def get_admin(
    admin_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_super_admin),
) -> Any:
    return admin_service.get_or_404(db, admin_id)


@router.post("", response_model=schemas.AdminCreated, status_code=201)
def create_admin(
    admin_in: schemas.AdminCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_super_admin),
) -> Any:
    admin, email_sent = admin_service.create_admin(db, data=admin_in, created_by=current_admin.id)
    return {"message": "Admin created successfully", "admin": admin, "email_sent": email_sent}


@router.put("/{admin_id}", response_model=schemas.Admin)
def update_admin(
    admin_id: int,
    admin_in: schemas.AdminUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_super_admin),
) -> Any:
    admin = admin_service.get_or_404(db, admin_id)
    return crud.admin.update(db, db_obj=admin, obj_in=admin_in)


@router.delete("/{admin_id}", response_model=schemas.MessageResponse)
def delete_admin(
    admin_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_super_admin),
) -> Any:
    admin_service.delete_admin(db, admin_id=admin_id, deleted_by=current_admin.id)
    return {"message": "Admin deleted successfully"}


@router.post("/{admin_id}/reset-password", response_model=schemas.MessageResponse)
def reset_admin_password(
    admin_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_super_admin),
) -> Any:
    email_sent = admin_service.reset_admin_password(db, admin_id=admin_id, reset_by=current_admin.id)
    return {"message": "Password reset and emailed to the admin", "email_sent": email_sent}
