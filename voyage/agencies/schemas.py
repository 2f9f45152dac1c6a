from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from voyage.pagination import PageMeta
from voyage.validators import not_nullable

GSTIN_PATTERN = r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[A-Z0-9]{1}[Z]{1}[A-Z0-9]{1}$"

class AgencyAdminUser(BaseModel):
    """First user of a new agency"""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)

class AgencyCreate(BaseModel):
    business_name: str = Field(..., min_length=1)
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    contact_person_name: str = Field(..., min_length=1)
    contact_person_email: EmailStr
    contact_person_phone: str = Field(..., min_length=1)
    gstin: Optional[str] = Field(None, pattern=GSTIN_PATTERN)
    user: Optional[AgencyAdminUser] = None

class AgencyUpdate(BaseModel):
    """Partial update; ``logo``/``letterhead`` set to null removes the file"""
    business_name: Optional[str] = Field(None, min_length=1)
    address_line1: Optional[str] = Field(None, min_length=1)
    address_line2: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    contact_person_name: Optional[str] = Field(None, min_length=1)
    contact_person_email: Optional[EmailStr] = None
    contact_person_phone: Optional[str] = Field(None, min_length=1)
    gstin: Optional[str] = Field(None, pattern=GSTIN_PATTERN)
    logo: Optional[str] = None
    letterhead: Optional[str] = None

    check_not_null = not_nullable(
        "business_name", "address_line1", "contact_person_name",
        "contact_person_email", "contact_person_phone"
    )

class Agency(BaseModel):
    id: int
    business_name: str
    address_line1: str
    address_line2: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    contact_person_name: str
    contact_person_email: str
    contact_person_phone: str
    gstin: Optional[str] = None
    logo: Optional[str] = None
    letterhead: Optional[str] = None
    upload_uuid: Optional[str] = None
    logo_url: Optional[str] = None
    letterhead_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AgencyWriteResult(BaseModel):
    message: str
    agency: Agency
    warnings: List[str] = []

class AgencyList(BaseModel):
    data: List[Agency]
    meta: PageMeta
