from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core.config import settings
from app.core.email_service import EmailTemplate
from app.core.exceptions import NotFoundError
from app.db.database import get_db
from app.schemas.member import total_pages
from app.services.notification_outbox import NotificationOutbox
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/directory", response_model=schemas.DirectoryPage)
def member_directory(
    search: Optional[str] = None,
    specialty: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> Any:
    """Active members who have opted in to the public directory"""
    members, total = crud.member.get_directory(
        db, search=search, specialty=specialty, page=page, limit=limit
    )
    return {
        "members": members,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages(total, limit),
    }


@router.get("/members/{membership_number}", response_model=schemas.MemberPublic)
def public_profile(membership_number: str, db: Session = Depends(get_db)) -> Any:
    member = crud.member.get_public_profile(db, membership_number=membership_number)
    if member is None:
        raise NotFoundError("Member not found")
    return member


@router.get("/verify/{membership_number}", response_model=schemas.MembershipVerification)
def verify_membership(membership_number: str, db: Session = Depends(get_db)) -> Any:
    member = crud.member.get_by_membership_number(db, membership_number=membership_number)
    if member is None:
        return {"valid": False, "membership_number": membership_number}
    return {
        "valid": True,
        "membership_number": member.membership_number,
        "is_active": member.is_active,
        "name": member.full_name,
        "area_of_specialty": member.area_of_specialty,
        "membership_type": member.membership_type,
        "joined_date": member.joined_date,
    }


@router.post("/contact", response_model=schemas.MessageResponse)
def contact(contact_in: schemas.ContactRequest) -> Any:
    """Relay a contact form message to the association's inbox"""
    outbox = NotificationOutbox()
    outbox.queue(
        EmailTemplate.CONTACT,
        settings.CONTACT_EMAIL,
        reply_to=contact_in.email,
        name=contact_in.name,
        email=contact_in.email,
        message=contact_in.message,
        subject=contact_in.subject,
    )
    email_sent = outbox.flush()
    if not email_sent:
        logger.error(f"Contact form message from {contact_in.email} could not be relayed")
    return {
        "message": "Thank you for contacting us. We will get back to you soon." if email_sent
        else "Your message could not be sent right now. Please try again later.",
        "email_sent": email_sent,
    }
