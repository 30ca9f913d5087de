"""
Administrative principal management (super admins only).
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app import crud
from app.core.email_service import EmailService, EmailTemplate
from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import generate_temporary_password
from app.models.admin import Admin
from app.schemas.admin import AdminCreate
from app.services.notification_outbox import NotificationOutbox

logger = logging.getLogger(__name__)


class AdminService:

    def __init__(self, gateway: Optional[EmailService] = None):
        self.gateway = gateway

    def get_or_404(self, db: Session, admin_id: int) -> Admin:
        admin = crud.admin.get(db, id=admin_id)
        if admin is None:
            raise NotFoundError("Admin not found")
        return admin

    def create_admin(self, db: Session, *, data: AdminCreate, created_by: int) -> Tuple[Admin, bool]:
        password = data.password or generate_temporary_password()
        admin = crud.admin.create(db, obj_in=data, password=password)
        logger.info(f"Admin {admin.id} ({admin.role.value}) created by admin {created_by}")

        outbox = NotificationOutbox(self.gateway)
        outbox.queue(EmailTemplate.ADMIN_WELCOME, admin.email, name=admin.name,
                     role=admin.role.value, temp_password=password)
        return admin, outbox.flush()

    def reset_admin_password(self, db: Session, *, admin_id: int, reset_by: int) -> bool:
        admin = self.get_or_404(db, admin_id)
        new_password = generate_temporary_password()
        crud.admin.update_password(db, db_obj=admin, new_password=new_password)
        logger.info(f"Password for admin {admin.id} reset by admin {reset_by}")

        outbox = NotificationOutbox(self.gateway)
        outbox.queue(EmailTemplate.ADMIN_PASSWORD_CHANGED, admin.email, name=admin.name,
                     new_password=new_password)
        return outbox.flush()

    def delete_admin(self, db: Session, *, admin_id: int, deleted_by: int) -> Admin:
        if admin_id == deleted_by:
            raise ValidationError("You cannot delete your own account", errors={"id": "self"})
        admin = self.get_or_404(db, admin_id)
        crud.admin.remove(db, id=admin.id)
        logger.info(f"Admin {admin_id} deleted by admin {deleted_by}")
        return admin


admin_service = AdminService()
