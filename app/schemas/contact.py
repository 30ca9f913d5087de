# File: app/schemas/contact.py
from pydantic import BaseModel, EmailStr, validator
from typing import Optional


class ContactRequest(BaseModel):
    name: str
    email: EmailStr
    subject: Optional[str] = None
    message: str

    @validator("name", "message")
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()
