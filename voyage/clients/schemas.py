from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import date, datetime
from enum import Enum

from voyage.pagination import PageMeta
from voyage.validators import not_nullable

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

class ClientCreate(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=100)
    gender: Optional[Gender] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=20)
    mobile: Optional[str] = Field(None, max_length=50)
    mobile2: Optional[str] = Field(None, max_length=50)
    passport_no: Optional[str] = Field(None, max_length=50)
    pan_no: Optional[str] = Field(None, max_length=20)
    aadhar_no: Optional[str] = Field(None, max_length=20)

    class Config:
        use_enum_values = True

class ClientUpdate(BaseModel):
    """Partial update; nullable fields may be cleared with null"""
    client_name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[Gender] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=20)
    mobile: Optional[str] = Field(None, max_length=50)
    mobile2: Optional[str] = Field(None, max_length=50)
    passport_no: Optional[str] = Field(None, max_length=50)
    pan_no: Optional[str] = Field(None, max_length=20)
    aadhar_no: Optional[str] = Field(None, max_length=20)

    check_not_null = not_nullable("client_name")

    class Config:
        use_enum_values = True

class Client(BaseModel):
    id: int
    agency_id: int
    client_name: str
    gender: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    pincode: Optional[str] = None
    mobile: Optional[str] = None
    mobile2: Optional[str] = None
    passport_no: Optional[str] = None
    pan_no: Optional[str] = None
    aadhar_no: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ClientList(BaseModel):
    data: List[Client]
    meta: PageMeta
