from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from voyage.validators import not_nullable

class TravelDocumentCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=2000)
    is_private: bool = False

class TravelDocumentUpdate(BaseModel):
    """Partial update; ``attachment`` set to null removes the file"""
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    is_private: Optional[bool] = None
    attachment: Optional[str] = None

    check_not_null = not_nullable("description", "is_private")

class TravelDocument(BaseModel):
    id: int
    booking_id: int
    description: str
    is_private: bool = False
    attachment: Optional[str] = None
    upload_uuid: Optional[str] = None
    attachment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TravelDocumentWriteResult(BaseModel):
    message: str
    travel_document: TravelDocument
    warnings: List[str] = []
