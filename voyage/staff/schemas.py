from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from voyage.pagination import PageMeta
from voyage.validators import not_nullable

class StaffRole(str, Enum):
    ADMIN = "admin"
    USER = "user"

class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    mobile: Optional[str] = Field(None, max_length=50)
    password: str = Field(..., min_length=6)
    role: StaffRole = Field(StaffRole.USER, validate_default=True)
    active: bool = True
    branch_id: int

    class Config:
        use_enum_values = True

class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    mobile: Optional[str] = Field(None, max_length=50)
    role: Optional[StaffRole] = None
    active: Optional[bool] = None
    branch_id: Optional[int] = None

    check_not_null = not_nullable("name", "email", "role", "active", "branch_id")

    class Config:
        use_enum_values = True

class PasswordChange(BaseModel):
    password: str = Field(..., min_length=6)

class ActiveStatus(BaseModel):
    active: bool

class StaffMember(BaseModel):
    id: int
    name: str
    email: EmailStr
    mobile: Optional[str] = None
    role: str
    active: bool
    agency_id: Optional[int] = None
    branch_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StaffList(BaseModel):
    data: List[StaffMember]
    meta: PageMeta

class StaffMessage(BaseModel):
    message: str
