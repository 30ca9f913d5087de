"""
Membership application review: approve, reject, under review and reopen.

Each transition claims the application with a conditional status write, does
its database work in one transaction and only then sends email.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.core.email_service import EmailService, EmailTemplate
from app.core.exceptions import InvalidStateError, MembershipError, NotFoundError, PersistenceError
from app.core.security import generate_temporary_password, utcnow
from app.models.application import Application, ApplicationStatus
from app.models.member import MembershipType
from app.models.profile_fields import PROFESSIONAL_PROFILE_FIELDS
from app.models.user import UserRole
from app.services.notification_outbox import NotificationOutbox

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    application: Application
    membership_number: Optional[str] = None
    # None when the transition sends no email
    email_sent: Optional[bool] = None


class ApprovalService:
    """Orchestrates application status transitions across applications, members and credentials"""

    def __init__(self, gateway: Optional[EmailService] = None):
        self.gateway = gateway

    def _load(self, db: Session, application_id: int, expected: ApplicationStatus) -> Application:
        application = crud.application.get(db, id=application_id)
        if application is None:
            raise NotFoundError("Application not found")
        if application.status != expected:
            raise InvalidStateError(
                f"Application is {application.status.value}; only {expected.value} applications can be updated this way"
            )
        return application

    def _claim(self, db: Session, application: Application, *, from_status: ApplicationStatus,
               to_status: ApplicationStatus, reviewer_id: Optional[int], notes: Optional[str]) -> None:
        claimed = crud.application.transition_status(
            db,
            id=application.id,
            from_status=from_status,
            to_status=to_status,
            reviewed_by=reviewer_id,
            notes=notes,
        )
        if not claimed:
            raise InvalidStateError(f"Application is no longer {from_status.value}")

    def _commit(self, db: Session, action: str, application_id: int) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to {action} application {application_id}")
            raise PersistenceError(internal=str(e))

    def approve(self, db: Session, *, application_id: int, reviewer_id: Optional[int],
                notes: Optional[str] = None) -> TransitionResult:
        application = self._load(db, application_id, ApplicationStatus.PENDING)
        email = application.email
        outbox = NotificationOutbox(self.gateway)

        try:
            self._claim(db, application, from_status=ApplicationStatus.PENDING,
                        to_status=ApplicationStatus.APPROVED, reviewer_id=reviewer_id, notes=notes)

            member = crud.member.get_by_email(db, email=email)
            if member is not None:
                # Already a member (imported or approved through another path): keep the number
                membership_number = member.membership_number
                crud.member.mark_account_created(db, db_obj=member, commit=False)
            else:
                membership_number = crud.membership_sequence.allocate(db)
                member_data = {name: getattr(application, name) for name in PROFESSIONAL_PROFILE_FIELDS}
                member_data.update(
                    email=email,
                    membership_number=membership_number,
                    membership_type=MembershipType.NEW,
                    is_active=True,
                    has_account=True,
                    account_created=utcnow(),
                )
                member = crud.member.create(db, obj_in=member_data, commit=False)

            temp_password = generate_temporary_password()
            # One credential per member: the number is the stable link, the email a fallback
            credential = (
                crud.user.get_by_membership_number(db, membership_number=membership_number)
                or crud.user.get_by_email(db, email=email)
            )
            credential_data = {
                "membership_number": membership_number,
                "first_name": application.first_name,
                "last_name": application.last_name,
                "password": temp_password,
                "is_active": True,
            }
            if credential is not None:
                # A fresh temporary password means the next login is a first login again
                crud.user.update(
                    db,
                    db_obj=credential,
                    obj_in={**credential_data, "email": email, "login_count": 0},
                    commit=False,
                )
            else:
                crud.user.create(db, obj_in={**credential_data, "email": email, "role": UserRole.MEMBER},
                                 commit=False)

            crud.application.attach_membership_number(db, id=application.id, membership_number=membership_number)
        except MembershipError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to approve application {application_id}")
            raise PersistenceError(internal=str(e))

        self._commit(db, "approve", application_id)
        logger.info(f"Application {application_id} approved by {reviewer_id}: membership number {membership_number}")

        outbox.queue(
            EmailTemplate.APPROVAL,
            email,
            membership_number=membership_number,
            temp_password=temp_password,
            first_name=application.first_name,
        )
        email_sent = outbox.flush()
        db.refresh(application)
        return TransitionResult(application, membership_number=membership_number, email_sent=email_sent)

    def reject(self, db: Session, *, application_id: int, reviewer_id: Optional[int],
               notes: Optional[str] = None) -> TransitionResult:
        application = self._load(db, application_id, ApplicationStatus.PENDING)
        email = application.email
        outbox = NotificationOutbox(self.gateway)

        try:
            self._claim(db, application, from_status=ApplicationStatus.PENDING,
                        to_status=ApplicationStatus.REJECTED, reviewer_id=reviewer_id, notes=notes)
            crud.user.deactivate_by_email(db, email=email, commit=False)
            member = crud.member.get_by_email(db, email=email)
            if member is not None and member.has_account:
                crud.member.update(db, db_obj=member, obj_in={"has_account": False}, commit=False)
        except MembershipError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to reject application {application_id}")
            raise PersistenceError(internal=str(e))

        self._commit(db, "reject", application_id)
        logger.info(f"Application {application_id} rejected by {reviewer_id}")

        outbox.queue(EmailTemplate.REJECTION, email, reason=notes)
        email_sent = outbox.flush()
        db.refresh(application)
        return TransitionResult(application, email_sent=email_sent)

    def mark_under_review(self, db: Session, *, application_id: int, reviewer_id: Optional[int],
                          notes: Optional[str] = None) -> TransitionResult:
        return self._simple_transition(db, application_id, ApplicationStatus.PENDING,
                                       ApplicationStatus.UNDER_REVIEW, reviewer_id, notes)

    def reopen(self, db: Session, *, application_id: int, reviewer_id: Optional[int],
               notes: Optional[str] = None) -> TransitionResult:
        """Move an application under review back to pending so it can be decided."""
        return self._simple_transition(db, application_id, ApplicationStatus.UNDER_REVIEW,
                                       ApplicationStatus.PENDING, reviewer_id, notes)

    def _simple_transition(self, db: Session, application_id: int, from_status: ApplicationStatus,
                           to_status: ApplicationStatus, reviewer_id: Optional[int],
                           notes: Optional[str]) -> TransitionResult:
        application = self._load(db, application_id, from_status)
        try:
            self._claim(db, application, from_status=from_status, to_status=to_status,
                        reviewer_id=reviewer_id, notes=notes)
        except MembershipError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to update application {application_id}")
            raise PersistenceError(internal=str(e))

        self._commit(db, "update", application_id)
        logger.info(f"Application {application_id} moved {from_status.value} -> {to_status.value} by {reviewer_id}")
        db.refresh(application)
        return TransitionResult(application)

    def update_status(self, db: Session, *, application_id: int, status: ApplicationStatus,
                      reviewer_id: Optional[int], notes: Optional[str] = None) -> TransitionResult:
        handlers = {
            ApplicationStatus.APPROVED: self.approve,
            ApplicationStatus.REJECTED: self.reject,
            ApplicationStatus.UNDER_REVIEW: self.mark_under_review,
            ApplicationStatus.PENDING: self.reopen,
        }
        return handlers[status](db, application_id=application_id, reviewer_id=reviewer_id, notes=notes)


approval_service = ApprovalService()
