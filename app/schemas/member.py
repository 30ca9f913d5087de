# File: app/schemas/member.py
from pydantic import BaseModel, EmailStr, validator
from typing import List, Optional
from datetime import datetime, date
from app.models.member import MembershipType
from app.schemas.application import ProfessionalProfile


class MemberCreate(ProfessionalProfile):
    email: EmailStr
    membership_number: str
    membership_type: MembershipType = MembershipType.NEW
    is_active: bool = True
    has_account: bool = False
    account_created: Optional[datetime] = None
    expiry_date: Optional[date] = None
    mbbs_certificate: Optional[str] = None
    fellowship_certificate: Optional[str] = None


class MemberUpdate(BaseModel):
    """Admin patch: only the fields sent are applied. The membership number is not editable."""
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    area_of_specialty: Optional[str] = None
    street_address: Optional[str] = None
    permanent_address: Optional[str] = None
    mdcn_registration_number: Optional[str] = None
    year_qualified_mbbs: Optional[int] = None
    additional_qualification_mdcn: Optional[str] = None
    year_qualified_urologist: Optional[int] = None
    current_practice: Optional[str] = None
    next_of_kin_name: Optional[str] = None
    next_of_kin_phone: Optional[str] = None
    next_of_kin_email: Optional[str] = None
    fellowship_college: Optional[str] = None
    fwacs: Optional[bool] = None
    fmcs: Optional[bool] = None
    facs: Optional[bool] = None
    frcs: Optional[bool] = None
    others: Optional[bool] = None
    qualification_year: Optional[int] = None
    additional_qualification: Optional[str] = None
    residency_training: Optional[str] = None
    foreign_institution: Optional[str] = None
    conference_attended: Optional[str] = None
    is_active: Optional[bool] = None
    show_in_directory: Optional[bool] = None
    membership_type: Optional[MembershipType] = None
    expiry_date: Optional[date] = None

    @validator("first_name", "last_name")
    def names_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v


class MemberProfileUpdate(BaseModel):
    """Fields a member may change on their own profile"""
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    area_of_specialty: Optional[str] = None
    street_address: Optional[str] = None
    permanent_address: Optional[str] = None
    current_practice: Optional[str] = None
    next_of_kin_name: Optional[str] = None
    next_of_kin_phone: Optional[str] = None
    next_of_kin_email: Optional[str] = None
    foreign_institution: Optional[str] = None
    conference_attended: Optional[str] = None

    @validator("first_name", "last_name")
    def names_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v


class DirectoryVisibility(BaseModel):
    show_in_directory: bool


class ExistingMemberCreate(BaseModel):
    """Admin onboarding of a member who joined before online applications"""
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: EmailStr
    membership_number: str
    phone_number: Optional[str] = None
    area_of_specialty: Optional[str] = None
    current_practice: Optional[str] = None
    mdcn_registration_number: Optional[str] = None

    @validator("first_name", "last_name", "membership_number")
    def required_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


# ==========================================
# RESPONSE SCHEMAS
# ==========================================

class Member(ProfessionalProfile):
    id: int
    membership_number: str
    email: str
    is_active: bool
    membership_type: MembershipType
    has_account: bool
    account_created: Optional[datetime] = None
    joined_date: Optional[datetime] = None
    expiry_date: Optional[date] = None
    profile_photo: Optional[str] = None
    show_in_directory: bool
    mbbs_certificate: Optional[str] = None
    fellowship_certificate: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberList(BaseModel):
    members: List[Member]
    total: int
    page: int
    limit: int
    total_pages: int


class MemberPublic(BaseModel):
    membership_number: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    full_name: str
    area_of_specialty: Optional[str] = None
    current_practice: Optional[str] = None
    profile_photo: Optional[str] = None
    joined_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class DirectoryPage(BaseModel):
    members: List[MemberPublic]
    total: int
    page: int
    limit: int
    total_pages: int


class MembershipVerification(BaseModel):
    valid: bool
    membership_number: str
    is_active: Optional[bool] = None
    name: Optional[str] = None
    area_of_specialty: Optional[str] = None
    membership_type: Optional[MembershipType] = None
    joined_date: Optional[datetime] = None


class ExistingMember(Member):
    account_active: Optional[bool] = None


class ExistingMemberCreated(BaseModel):
    message: str
    member: Member
    email_sent: bool


class UploadResult(BaseModel):
    message: str
    url: str


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0
