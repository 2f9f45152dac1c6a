from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from voyage.pagination import PageMeta
from voyage.validators import not_nullable

class BranchCreate(BaseModel):
    branch_name: str = Field(..., min_length=1, max_length=100)
    address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_mobile: Optional[str] = Field(None, max_length=50)

class BranchUpdate(BaseModel):
    branch_name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_mobile: Optional[str] = Field(None, max_length=50)

    check_not_null = not_nullable("branch_name")

class Branch(BaseModel):
    id: int
    agency_id: int
    branch_name: str
    address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_mobile: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BranchList(BaseModel):
    data: List[Branch]
    meta: PageMeta
