"""
Public membership application intake.
"""
import logging
from typing import Dict, Tuple

from sqlalchemy.orm import Session

from app import crud
from app.core.exceptions import ConflictError, ValidationError
from app.core.storage import FileKind, validate_upload
from app.models.application import Application
from app.schemas.application import ApplicationCreate

logger = logging.getLogger(__name__)

CERTIFICATE_FIELDS = ("mbbs_certificate", "fellowship_certificate")


def submit_application(db: Session, *, data: ApplicationCreate,
                       certificates: Dict[str, Tuple[bytes, str]], storage) -> Application:
    """
    Store both certificates and create a pending application. Everything is
    validated before the first write; stored files are removed again if the
    insert fails.
    """
    missing = {name: "This file is required" for name in CERTIFICATE_FIELDS if name not in certificates}
    if missing:
        raise ValidationError("Both MBBS and fellowship certificates are required", errors=missing)
    for name, (content, filename) in certificates.items():
        try:
            validate_upload(content, filename, FileKind.CERTIFICATE)
        except ValidationError as e:
            raise ValidationError(e.message, errors={name: e.errors.get("file", "invalid file")})

    if crud.application.get_by_email(db, email=data.email):
        raise ConflictError("An application with this email already exists")

    stored = {}
    try:
        for name in CERTIFICATE_FIELDS:
            content, filename = certificates[name]
            stored[name] = storage.store(content, filename, FileKind.CERTIFICATE)
        application = crud.application.create(db, obj_in=data.copy(update=stored))
    except Exception:
        for reference in stored.values():
            storage.delete(reference)
        raise

    logger.info(f"Application {application.id} submitted")
    return application
