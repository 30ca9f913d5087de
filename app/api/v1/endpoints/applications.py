from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from app import crud, schemas
from app.core.deps import require_membership_admin
from app.core.exceptions import NotFoundError
from app.core.storage import get_file_storage
from app.db.database import get_db
from app.models.admin import Admin
from app.models.application import ApplicationStatus
from app.schemas.application import parse_application_form
from app.services.application_service import CERTIFICATE_FIELDS, submit_application
from app.services.approval_service import approval_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


@router.post("", response_model=schemas.ApplicationSubmitted, status_code=201)
async def submit(
    request: Request,
    db: Session = Depends(get_db),
    storage=Depends(get_file_storage),
) -> Any:
    """
    Submit a membership application (multipart form with `mbbs_certificate`
    and `fellowship_certificate` files).
    """
    form = await request.form()
    fields: Dict[str, Any] = {}
    certificates = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in CERTIFICATE_FIELDS and value.filename:
                certificates[key] = (await value.read(), value.filename)
        else:
            fields[key] = value

    application_in = parse_application_form(fields)
    application = await run_in_threadpool(
        submit_application, db, data=application_in, certificates=certificates, storage=storage
    )
    return {
        "message": "Application submitted successfully. You will be notified once it has been reviewed.",
        "id": application.id,
    }


# ==========================================
# ADMIN REVIEW
# ==========================================

@admin_router.get("", response_model=List[schemas.Application])
def list_applications(
    status: Optional[ApplicationStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    return crud.application.get_multi_by_status(db, status=status, skip=skip, limit=limit)


@admin_router.get("/{application_id}", response_model=schemas.Application)
def get_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    application = crud.application.get(db, id=application_id)
    if application is None:
        raise NotFoundError("Application not found")
    return application


@admin_router.put("/{application_id}/status", response_model=schemas.ApplicationTransitionResponse)
def update_application_status(
    application_id: int,
    status_in: schemas.ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_membership_admin),
) -> Any:
    """Approve, reject, put under review, or reopen an application."""
    result = approval_service.update_status(
        db,
        application_id=application_id,
        status=status_in.status,
        reviewer_id=current_admin.id,
        notes=status_in.notes,
    )
    application = result.application
    return {
        "message": f"Application {application.status.value.replace('_', ' ')} successfully",
        "application": {
            "id": application.id,
            "status": application.status,
            "membership_number": application.membership_number,
        },
        "email_sent": result.email_sent,
    }
