from typing import Any
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core.deps import get_current_member
from app.core.storage import get_file_storage
from app.db.database import get_db
from app.models.member import Member
from app.services.member_service import member_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=schemas.Member)
def read_profile(current_member: Member = Depends(get_current_member)) -> Any:
    return current_member


@router.put("", response_model=schemas.Member)
def update_profile(
    profile_in: schemas.MemberProfileUpdate,
    db: Session = Depends(get_db),
    current_member: Member = Depends(get_current_member),
) -> Any:
    """Update the signed-in member's own profile; omitted fields are left as they are"""
    update_data = profile_in.dict(exclude_unset=True)
    member = crud.member.update(db, db_obj=current_member, obj_in=update_data)
    logger.info(f"Member {member.membership_number} updated profile fields: {sorted(update_data)}")
    return member


@router.post("/upload/{document}", response_model=schemas.UploadResult)
def upload_document(
    document: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage=Depends(get_file_storage),
    current_member: Member = Depends(get_current_member),
) -> Any:
    """Upload `mbbs` or `fellowship` certificate, or a profile `photo`"""
    content = file.file.read()
    url = member_service.replace_document(
        db,
        member=current_member,
        document=document,
        content=content,
        filename=file.filename,
        storage=storage,
    )
    return {"message": "File uploaded successfully", "url": url}


@router.put("/directory", response_model=schemas.Member)
def set_directory_visibility(
    visibility_in: schemas.DirectoryVisibility,
    db: Session = Depends(get_db),
    current_member: Member = Depends(get_current_member),
) -> Any:
    return crud.member.update(
        db, db_obj=current_member, obj_in={"show_in_directory": visibility_in.show_in_directory}
    )
