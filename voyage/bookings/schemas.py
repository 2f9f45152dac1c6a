from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from voyage.pagination import PageMeta

class PaymentMode(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    UPI = "upi"
    CARD = "card"

# Booking Schemas
class BookingCreate(BaseModel):
    """New booking; ``branch_id`` is required only for agency admins"""
    branch_id: Optional[int] = None
    client_id: int
    tour_id: Optional[int] = None
    booking_date: Optional[date] = None
    journey_date: Optional[date] = None
    number_of_adults: int = Field(1, ge=0)
    number_of_children: int = Field(0, ge=0)
    booking_detail: Optional[str] = None

class Booking(BaseModel):
    id: int
    agency_id: int
    branch_id: Optional[int] = None
    client_id: int
    client_name: Optional[str] = None
    tour_id: Optional[int] = None
    booking_number: str
    booking_date: Optional[date] = None
    journey_date: Optional[date] = None
    number_of_adults: Optional[int] = None
    number_of_children: Optional[int] = None
    booking_detail: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BookingList(BaseModel):
    data: List[Booking]
    meta: PageMeta

# Group Booking Schemas
class GroupBookingCreate(BaseModel):
    branch_id: Optional[int] = None
    tour_id: Optional[int] = None
    group_booking_date: Optional[date] = None
    journey_date: Optional[date] = None
    booking_detail: Optional[str] = None

class GroupBooking(BaseModel):
    id: int
    agency_id: int
    branch_id: Optional[int] = None
    tour_id: Optional[int] = None
    group_booking_number: str
    group_booking_date: Optional[date] = None
    journey_date: Optional[date] = None
    booking_detail: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Receipt Schemas
class ReceiptCreate(BaseModel):
    receipt_date: Optional[date] = None
    payment_mode: PaymentMode
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    cgst_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    sgst_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    igst_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)

class Receipt(BaseModel):
    id: int
    booking_id: int
    receipt_number: str
    receipt_date: date
    payment_mode: str
    amount: Decimal
    cgst_amount: Optional[Decimal] = None
    sgst_amount: Optional[Decimal] = None
    igst_amount: Optional[Decimal] = None
    total_amount: Decimal
    invoice_number: Optional[str] = None
    invoiced_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class InvoiceResult(BaseModel):
    message: str
    receipt: Receipt

# Vehicle Booking Schemas
class VehicleBookingCreate(BaseModel):
    vehicle_booking_date: Optional[date] = None
    from_date: date
    to_date: Optional[date] = None
    number_of_vehicles: int = Field(1, ge=1)
    pickup_place: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("to_date")
    @classmethod
    def validate_dates(cls, v, info):
        from_date = info.data.get("from_date")
        if v and from_date and v < from_date:
            raise ValueError("to_date must not be before from_date")
        return v

class VehicleBooking(BaseModel):
    id: int
    booking_id: int
    vehicle_hrv_number: str
    vehicle_booking_date: Optional[date] = None
    from_date: date
    to_date: Optional[date] = None
    number_of_vehicles: Optional[int] = None
    pickup_place: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
