"""
Member and admin credentials: login, self-service account creation,
password change and the emailed password-reset protocol.
"""
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.core.email_service import EmailService, EmailTemplate
from app.core.exceptions import (
    AccountDisabledError,
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    MembershipError,
    PersistenceError,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    generate_reset_token,
    hash_token,
    utcnow,
    verify_password,
)
from app.crud.base import CRUDPrincipal
from app.models.admin import Admin
from app.models.user import User, UserRole
from app.schemas.auth import CreateAccountRequest, Token
from app.services.notification_outbox import NotificationOutbox

logger = logging.getLogger(__name__)

# Same text whether or not the email has an account
RESET_REQUESTED_MESSAGE = "If an account exists with this email, you will receive a password reset link."


class AccountService:

    def __init__(self, gateway: Optional[EmailService] = None):
        self.gateway = gateway

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login_member(self, db: Session, *, email: str, password: str) -> Token:
        user = crud.user.get_by_email(db, email=email)
        if user is None or user.role != UserRole.MEMBER or not verify_password(password, user.hashed_password):
            logger.info(f"Failed member login for {email}")
            raise AuthenticationError()
        if not user.is_active:
            raise AccountDisabledError()

        first_login = not user.login_count
        user = crud.user.update_last_login(db, db_obj=user)
        logger.info(f"Member {user.membership_number} logged in (login #{user.login_count})")

        token = create_access_token(
            user.email,
            principal_id=user.id,
            role=user.role.value,
            principal_type="member",
            membership_number=user.membership_number,
        )
        return Token(
            access_token=token,
            role=user.role.value,
            principal_id=user.id,
            membership_number=user.membership_number,
            must_change_password=first_login,
        )

    def login_admin(self, db: Session, *, email: str, password: str) -> Token:
        admin = crud.admin.get_by_email(db, email=email)
        if admin is None or not verify_password(password, admin.hashed_password):
            logger.info(f"Failed admin login for {email}")
            raise AuthenticationError()
        if not admin.is_active:
            raise AccountDisabledError("Admin account is inactive")

        admin = crud.admin.update_last_login(db, db_obj=admin)
        logger.info(f"Admin {admin.id} logged in")
        token = create_access_token(
            admin.email,
            principal_id=admin.id,
            role=admin.role.value,
            principal_type="admin",
            expires_delta=timedelta(minutes=settings.ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        return Token(access_token=token, role=admin.role.value, principal_id=admin.id)

    # ------------------------------------------------------------------
    # Self-service account creation
    # ------------------------------------------------------------------

    def create_account(self, db: Session, *, request: CreateAccountRequest) -> User:
        """Open a login for an imported member who does not have one yet."""
        member = crud.member.get_by_membership_number(db, membership_number=request.membership_number)
        if member is None:
            raise ValidationError(
                "Invalid membership number. Please check and try again.",
                errors={"membership_number": "not found"},
            )
        if member.has_account:
            raise ConflictError("An account already exists for this membership number. Please login instead.")
        email = request.email.strip().lower()
        if email != member.email:
            raise ValidationError(
                "Email does not match the membership record",
                errors={"email": "does not match membership record"},
            )
        if crud.user.get_by_email(db, email=email):
            raise ConflictError("An account with this email already exists")

        try:
            user = crud.user.create(
                db,
                obj_in={
                    "email": email,
                    "membership_number": member.membership_number,
                    "first_name": request.first_name,
                    "last_name": request.last_name,
                    "password": request.password,
                    "role": UserRole.MEMBER,
                },
                commit=False,
            )
            crud.member.mark_account_created(db, db_obj=member, commit=False)
            db.commit()
        except MembershipError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to create account for member {member.membership_number}")
            raise PersistenceError(internal=str(e))

        db.refresh(user)
        logger.info(f"Account created for member {member.membership_number}")
        return user

    # ------------------------------------------------------------------
    # Password change / reset
    # ------------------------------------------------------------------

    def change_password(self, db: Session, *, principal, current_password: str, new_password: str) -> bool:
        """Returns whether the confirmation email went out."""
        if not verify_password(current_password, principal.hashed_password):
            raise ValidationError("Current password is incorrect", errors={"current_password": "incorrect"})
        store = self._store_for(principal)
        store.update_password(db, db_obj=principal, new_password=new_password)
        logger.info(f"Password changed for {principal.email}")

        outbox = NotificationOutbox(self.gateway)
        outbox.queue(EmailTemplate.PASSWORD_CHANGED, principal.email)
        return outbox.flush()

    def request_password_reset(self, db: Session, *, email: str, admin: bool = False) -> str:
        """
        Issue a reset token and email it. The stored value is only the token's
        sha256; the response text is identical whether or not the email is known.
        """
        store = crud.admin if admin else crud.user
        principal = store.get_by_email(db, email=email)
        if principal is None or not principal.is_active:
            logger.info("Password reset requested for unknown or inactive account")
            return RESET_REQUESTED_MESSAGE

        token = generate_reset_token()
        expires_at = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
        store.set_reset_token(db, db_obj=principal, token_hash=hash_token(token), expires_at=expires_at)
        logger.info(f"Password reset token issued for {principal.email}")

        outbox = NotificationOutbox(self.gateway)
        outbox.queue(
            EmailTemplate.PASSWORD_RESET,
            principal.email,
            reset_token=token,
            reset_path="/admin/reset-password" if admin else "/reset-password",
        )
        outbox.flush()
        return RESET_REQUESTED_MESSAGE

    def verify_reset_token(self, db: Session, *, token: str, admin: bool = False) -> bool:
        store = crud.admin if admin else crud.user
        return store.get_by_reset_token(db, token_hash=hash_token(token)) is not None

    def reset_password(self, db: Session, *, token: str, new_password: str, admin: bool = False) -> bool:
        """Redeem a reset token. The token is cleared in the same commit, so it cannot be used twice."""
        store = crud.admin if admin else crud.user
        principal = store.get_by_reset_token(db, token_hash=hash_token(token))
        if principal is None:
            raise InvalidTokenError()

        try:
            store.update_password(db, db_obj=principal, new_password=new_password, commit=False)
            store.clear_reset_token(db, db_obj=principal, commit=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Failed to reset password")
            raise PersistenceError(internal=str(e))

        logger.info(f"Password reset completed for {principal.email}")
        outbox = NotificationOutbox(self.gateway)
        outbox.queue(EmailTemplate.PASSWORD_CHANGED, principal.email)
        return outbox.flush()

    @staticmethod
    def _store_for(principal) -> CRUDPrincipal:
        return crud.admin if isinstance(principal, Admin) else crud.user


account_service = AccountService()
