"""
Member-side operations that span more than one store: onboarding members who
joined before online applications, and replacing uploaded documents.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.core.email_service import EmailService, EmailTemplate
from app.core.exceptions import ConflictError, MembershipError, PersistenceError, ValidationError
from app.core.security import generate_temporary_password, utcnow
from app.core.storage import FileKind
from app.models.application import Application, ApplicationStatus, PaymentStatus
from app.models.member import Member, MembershipType
from app.models.user import UserRole
from app.schemas.member import ExistingMemberCreate
from app.services.notification_outbox import NotificationOutbox

logger = logging.getLogger(__name__)

ONBOARDING_NOTE = "Existing member added by admin"

# Member column holding each kind of upload
DOCUMENT_FIELDS = {
    "mbbs": "mbbs_certificate",
    "fellowship": "fellowship_certificate",
    "photo": "profile_photo",
}


class MemberService:

    def __init__(self, gateway: Optional[EmailService] = None):
        self.gateway = gateway

    def onboard_existing_member(self, db: Session, *, data: ExistingMemberCreate,
                                admin_id: Optional[int]) -> Tuple[Member, bool]:
        """
        Create the member, its login and an approved application record in one
        transaction, then email the temporary password.
        """
        email = data.email.strip().lower()
        if crud.member.get_by_email(db, email=email) or crud.user.get_by_email(db, email=email):
            raise ConflictError("A member with this email already exists")
        if crud.member.get_by_membership_number(db, membership_number=data.membership_number):
            raise ConflictError("Membership number already exists")
        if crud.application.get_by_email(db, email=email):
            raise ConflictError("An application with this email already exists")

        temp_password = generate_temporary_password()
        now = utcnow()
        profile = data.dict(exclude={"email", "membership_number"})

        try:
            member = crud.member.create(
                db,
                obj_in={
                    **profile,
                    "email": email,
                    "membership_number": data.membership_number,
                    "membership_type": MembershipType.EXISTING,
                    "is_active": True,
                    "has_account": True,
                    "account_created": now,
                },
                commit=False,
            )
            crud.user.create(
                db,
                obj_in={
                    "email": email,
                    "membership_number": data.membership_number,
                    "first_name": data.first_name,
                    "last_name": data.last_name,
                    "password": temp_password,
                    "role": UserRole.MEMBER,
                },
                commit=False,
            )
            db.add(Application(
                **profile,
                email=email,
                status=ApplicationStatus.APPROVED,
                payment_status=PaymentStatus.PAID,
                membership_number=data.membership_number,
                reviewed_by=admin_id,
                reviewed_at=now,
                admin_notes=ONBOARDING_NOTE,
            ))
            db.commit()
        except MembershipError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to onboard existing member {data.membership_number}")
            raise PersistenceError(internal=str(e))

        db.refresh(member)
        logger.info(f"Existing member {member.membership_number} onboarded by admin {admin_id}")

        outbox = NotificationOutbox(self.gateway)
        outbox.queue(
            EmailTemplate.WELCOME,
            email,
            first_name=member.first_name,
            last_name=member.last_name,
            membership_number=member.membership_number,
            temp_password=temp_password,
        )
        return member, outbox.flush()

    def replace_document(self, db: Session, *, member: Member, document: str, content: bytes,
                         filename: str, storage) -> str:
        """Store a new certificate or photo for the member and delete the old one best-effort."""
        field = DOCUMENT_FIELDS.get(document)
        if field is None:
            raise ValidationError("Unknown document type", errors={"document": f"must be one of {sorted(DOCUMENT_FIELDS)}"})
        kind = FileKind.PHOTO if document == "photo" else FileKind.CERTIFICATE

        reference = storage.store(content, filename, kind)
        previous = getattr(member, field)
        try:
            crud.member.update(db, db_obj=member, obj_in={field: reference})
        except SQLAlchemyError as e:
            db.rollback()
            storage.delete(reference)
            logger.exception(f"Failed to save {document} for member {member.membership_number}")
            raise PersistenceError(internal=str(e))

        if previous and previous != reference:
            if not storage.delete(previous):
                logger.warning(f"Could not delete previous {document} for member {member.membership_number}")
        logger.info(f"Updated {document} for member {member.membership_number}")
        return reference


member_service = MemberService()
