"""
Booking Management Module

Bookings, group bookings, payment receipts, invoices and vehicle hire
vouchers. Every one of these documents carries a per-agency, per-fiscal-year
number issued by ``voyage.numbering``.

Key Components:
- booking_service.py: bookings and group bookings, branch resolution
- receipt_service.py: payment receipts and idempotent invoice numbers
- vehicle_service.py: vehicle hire vouchers (HRV numbers)
- router.py: FastAPI endpoints
- schemas.py: Pydantic request and response models
"""

from .router import router
from .booking_service import BookingService
from .receipt_service import ReceiptService
from .vehicle_service import VehicleBookingService

__all__ = [
    "router",
    "BookingService",
    "ReceiptService",
    "VehicleBookingService"
]
