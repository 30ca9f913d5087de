from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core.deps import require_membership_admin
from app.core.exceptions import NotFoundError
from app.db.database import get_db
from app.models.admin import Admin
from app.models.member import MembershipType
from app.schemas.member import total_pages
from app.services.member_service import member_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_member_or_404(db: Session, member_id: int):
    member = crud.member.get(db, id=member_id)
    if member is None:
        raise NotFoundError("Member not found")
    return member


@router.get("", response_model=schemas.MemberList)
def list_members(
    search: Optional[str] = None,
    specialty: Optional[str] = None,
    is_active: Optional[bool] = None,
    membership_type: Optional[MembershipType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    members, total = crud.member.get_multi_filtered(
        db,
        search=search,
        specialty=specialty,
        is_active=is_active,
        membership_type=membership_type,
        page=page,
        limit=limit,
    )
    return {
        "members": members,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages(total, limit),
    }


@router.get("/search", response_model=List[schemas.Member])
def search_members(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    """Quick search by name, email or membership number (first 50 matches)"""
    return crud.member.quick_search(db, q=q)


# ==========================================
# EXISTING (PRE-ONLINE) MEMBERS
# ==========================================

@router.post("/existing", response_model=schemas.ExistingMemberCreated, status_code=201)
def add_existing_member(
    member_in: schemas.ExistingMemberCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    member, email_sent = member_service.onboard_existing_member(db, data=member_in, admin_id=current_admin.id)
    message = "Existing member added successfully"
    if not email_sent:
        message += ", but the welcome email could not be sent"
    return {"message": message, "member": member, "email_sent": email_sent}


@router.get("/existing", response_model=List[schemas.ExistingMember])
def list_existing_members(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    rows = crud.member.get_existing_members(db, skip=skip, limit=limit)
    return [
        schemas.ExistingMember.model_validate(member).copy(update={"account_active": account_active})
        for member, account_active in rows
    ]


@router.get("/{member_id}", response_model=schemas.Member)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    return _get_member_or_404(db, member_id)


@router.put("/{member_id}", response_model=schemas.Member)
def update_member(
    member_id: int,
    member_in: schemas.MemberUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    """Partial update: only the fields present in the body are changed"""
    member = _get_member_or_404(db, member_id)
    member = crud.member.update(db, db_obj=member, obj_in=member_in)
    logger.info(f"Member {member.membership_number} updated by admin {current_admin.id}")
    return member


@router.patch("/{member_id}/toggle-status", response_model=schemas.Member)
def toggle_member_status(
    member_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    member = crud.member.toggle_active(db, db_obj=_get_member_or_404(db, member_id))
    logger.info(
        f"Member {member.membership_number} {'activated' if member.is_active else 'deactivated'} "
        f"by admin {current_admin.id}"
    )
    return member


@router.delete("/{member_id}", response_model=schemas.MessageResponse)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    """Permanently delete a member with their account and application"""
    member = crud.member.remove_with_dependents(db, id=member_id)
    return {"message": f"Member {member.membership_number} deleted successfully"}
