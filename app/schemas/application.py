# File: app/schemas/application.py
from pydantic import BaseModel, EmailStr, validator
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, Optional
from datetime import datetime, date
from app.core.exceptions import ValidationError
from app.models.application import ApplicationStatus, PaymentStatus

TRUTHY = {"true", "1", "on", "yes"}

FELLOWSHIP_FLAGS = ("fwacs", "fmcs", "facs", "frcs", "others")
OPTIONAL_INTS = ("year_qualified_mbbs", "year_qualified_urologist", "qualification_year")

# Fields an applicant must fill in on the submission form
REQUIRED_APPLICATION_FIELDS = (
    "first_name", "last_name", "email", "phone_number", "mdcn_registration_number",
    "year_qualified_mbbs", "additional_qualification_mdcn", "year_qualified_urologist",
    "current_practice", "next_of_kin_name", "next_of_kin_phone", "next_of_kin_email",
    "fellowship_college", "qualification_year", "additional_qualification",
    "residency_training", "declaration",
)


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


# ==========================================
# SHARED PROFILE FIELDS
# ==========================================

class ProfessionalProfile(BaseModel):
    """Applicant-supplied profile fields, shared by applications and members"""
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    area_of_specialty: Optional[str] = None
    phone_number: Optional[str] = None
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
    fwacs: bool = False
    fmcs: bool = False
    facs: bool = False
    frcs: bool = False
    others: bool = False
    qualification_year: Optional[int] = None
    additional_qualification: Optional[str] = None
    residency_training: Optional[str] = None
    foreign_institution: Optional[str] = None
    conference_attended: Optional[str] = None
    declaration: Optional[str] = None
    declaration_date: Optional[date] = None

    @validator(*FELLOWSHIP_FLAGS, pre=True)
    def parse_checkbox(cls, v):
        return to_bool(v)

    @validator(*OPTIONAL_INTS, "declaration_date", pre=True)
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


# ==========================================
# REQUEST SCHEMAS
# ==========================================

class ApplicationCreate(ProfessionalProfile):
    """Submission form for a new membership application"""
    email: EmailStr
    area_of_specialty: Optional[str] = "General Surgery"
    mbbs_certificate: Optional[str] = None
    fellowship_certificate: Optional[str] = None

    @validator("email", pre=True)
    def normalise_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @validator("area_of_specialty", pre=True)
    def default_specialty(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "General Surgery"
        return v


class ApplicationStatusUpdate(BaseModel):
    """Admin transition of an application"""
    status: ApplicationStatus
    notes: Optional[str] = None


# ==========================================
# RESPONSE SCHEMAS
# ==========================================

class Application(ProfessionalProfile):
    id: int
    email: str
    status: ApplicationStatus
    payment_status: PaymentStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    membership_number: Optional[str] = None
    mbbs_certificate: Optional[str] = None
    fellowship_certificate: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApplicationSubmitted(BaseModel):
    message: str
    id: int


class ApplicationStatusSummary(BaseModel):
    id: int
    status: ApplicationStatus
    membership_number: Optional[str] = None


class ApplicationTransitionResponse(BaseModel):
    message: str
    application: ApplicationStatusSummary
    email_sent: Optional[bool] = None


# ==========================================
# FORM PARSING
# ==========================================

def parse_application_form(data: Dict[str, Any]) -> ApplicationCreate:
    """Build an ApplicationCreate from raw form data, reporting every missing or malformed field."""
    errors: Dict[str, str] = {}
    cleaned = {k: (v.strip() if isinstance(v, str) else v) for k, v in data.items()}

    for field in REQUIRED_APPLICATION_FIELDS:
        if cleaned.get(field) in (None, ""):
            errors[field] = "This field is required"

    try:
        application = ApplicationCreate(**cleaned)
    except PydanticValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            errors.setdefault(field, error["msg"])
        application = None

    if errors:
        raise ValidationError("Missing or invalid required fields", errors=errors)
    return application
