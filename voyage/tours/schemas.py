from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from voyage.pagination import PageMeta
from voyage.validators import not_nullable

class TourStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class TourCreate(BaseModel):
    tour_title: str = Field(..., min_length=1, max_length=255)
    tour_type: Optional[str] = None
    destination: Optional[str] = None
    status: TourStatus = TourStatus.ACTIVE
    number_of_nights: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

class TourUpdate(BaseModel):
    """Partial update; ``attachment`` set to null removes the file"""
    tour_title: Optional[str] = Field(None, min_length=1, max_length=255)
    tour_type: Optional[str] = None
    destination: Optional[str] = None
    status: Optional[TourStatus] = None
    number_of_nights: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    attachment: Optional[str] = None

    check_not_null = not_nullable("tour_title", "status")

class Tour(BaseModel):
    id: int
    agency_id: int
    tour_title: str
    tour_type: Optional[str] = None
    destination: Optional[str] = None
    status: Optional[str] = None
    number_of_nights: Optional[int] = None
    notes: Optional[str] = None
    attachment: Optional[str] = None
    upload_uuid: Optional[str] = None
    attachment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TourWriteResult(BaseModel):
    message: str
    tour: Tour
    warnings: List[str] = []

class TourList(BaseModel):
    data: List[Tour]
    meta: PageMeta
