# File: app/models/profile_fields.py
from sqlalchemy import Column, String, Text, Integer, Boolean, Date


def enum_values(enum_cls):
    """Persist enum values (lowercase) rather than member names."""
    return [member.value for member in enum_cls]


class ProfessionalProfileMixin:
    """Applicant fields shared by applications and the member records copied from them."""

    # Identity / contact
    first_name = Column(String(255), nullable=False)
    middle_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=False)
    area_of_specialty = Column(Text, nullable=True)
    phone_number = Column(String(255), nullable=True)
    street_address = Column(Text, nullable=True)
    permanent_address = Column(Text, nullable=True)

    # Registration / qualifications
    mdcn_registration_number = Column(String(255), nullable=True)
    year_qualified_mbbs = Column(Integer, nullable=True)
    additional_qualification_mdcn = Column(String(255), nullable=True)
    year_qualified_urologist = Column(Integer, nullable=True)
    current_practice = Column(String(255), nullable=True)

    # Next of kin
    next_of_kin_name = Column(String(255), nullable=True)
    next_of_kin_phone = Column(String(255), nullable=True)
    next_of_kin_email = Column(String(255), nullable=True)

    # Fellowship
    fellowship_college = Column(String(255), nullable=True)
    fwacs = Column(Boolean, default=False)
    fmcs = Column(Boolean, default=False)
    facs = Column(Boolean, default=False)
    frcs = Column(Boolean, default=False)
    others = Column(Boolean, default=False)
    qualification_year = Column(Integer, nullable=True)
    additional_qualification = Column(String(255), nullable=True)
    residency_training = Column(Text, nullable=True)
    foreign_institution = Column(String(255), nullable=True)
    conference_attended = Column(String(255), nullable=True)

    # Declaration
    declaration = Column(Text, nullable=True)
    declaration_date = Column(Date, nullable=True)

    # Certificate references (opaque storage handles)
    mbbs_certificate = Column(String(500), nullable=True)
    fellowship_certificate = Column(String(500), nullable=True)


PROFESSIONAL_PROFILE_FIELDS = [
    "first_name", "middle_name", "last_name", "area_of_specialty", "phone_number",
    "street_address", "permanent_address", "mdcn_registration_number", "year_qualified_mbbs",
    "additional_qualification_mdcn", "year_qualified_urologist", "current_practice",
    "next_of_kin_name", "next_of_kin_phone", "next_of_kin_email", "fellowship_college",
    "fwacs", "fmcs", "facs", "frcs", "others", "qualification_year", "additional_qualification",
    "residency_training", "foreign_institution", "conference_attended", "declaration",
    "declaration_date", "mbbs_certificate", "fellowship_certificate",
]
