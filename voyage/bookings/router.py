import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session
from typing import List

from voyage.database import get_db
from voyage.auth.dependencies import get_agency_user
from voyage.exceptions import VoyageError
from voyage.bookings.schemas import (
    Booking, BookingCreate, BookingList, GroupBooking, GroupBookingCreate,
    InvoiceResult, Receipt, ReceiptCreate, VehicleBooking, VehicleBookingCreate
)
from voyage.bookings.booking_service import BookingService
from voyage.bookings.receipt_service import ReceiptService
from voyage.bookings.vehicle_service import VehicleBookingService
from voyage.uploads import UploadStorage, get_upload_storage

logger = logging.getLogger(__name__)

router = APIRouter()

def _server_error(action: str, e: Exception) -> HTTPException:
    logger.exception("Failed to %s", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"errors": {"message": f"Failed to {action}", "details": str(e)}}
    )

# Group Booking Endpoints
@router.post("/group", response_model=GroupBooking, status_code=status.HTTP_201_CREATED)
def create_group_booking(
    request: GroupBookingCreate,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Create a group booking with the next group booking number"""
    try:
        return BookingService(db, storage, current_user).create_group_booking(request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error("create group booking", e)

@router.get("/group/{group_booking_id}", response_model=GroupBooking)
def get_group_booking(
    group_booking_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    try:
        return BookingService(db, storage, current_user).get_group_booking(group_booking_id)
    except VoyageError as e:
        raise e.to_http_exception()

# Booking Management Endpoints
@router.get("/", response_model=BookingList)
def get_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", description="Search booking number or client name"),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """List the agency's bookings"""
    bookings, meta = BookingService(db, storage, current_user).list_bookings(page, limit, search, sort_by, order)
    return BookingList(data=bookings, meta=meta)

@router.post("/", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreate,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Create a booking with the next booking number"""
    service = BookingService(db, storage, current_user)
    try:
        return service.to_schema(service.create_booking(request))
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error("create booking", e)

@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    service = BookingService(db, storage, current_user)
    try:
        return service.to_schema(service.get_booking(booking_id))
    except VoyageError as e:
        raise e.to_http_exception()

@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Delete a booking together with its travel document files"""
    try:
        BookingService(db, storage, current_user).delete_booking(booking_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# Receipt & Invoice Endpoints
@router.get("/{booking_id}/receipts", response_model=List[Receipt])
def get_receipts(
    booking_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    try:
        booking = BookingService(db, storage, current_user).get_booking(booking_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return ReceiptService(db, current_user.agency_id).list_receipts(booking)

@router.post("/{booking_id}/receipts", response_model=Receipt, status_code=status.HTTP_201_CREATED)
def create_receipt(
    booking_id: int,
    request: ReceiptCreate,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Record a payment against a booking"""
    try:
        booking = BookingService(db, storage, current_user).get_booking(booking_id)
        return ReceiptService(db, current_user.agency_id).create_receipt(booking, request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error("create receipt", e)

@router.post("/{booking_id}/receipts/{receipt_id}/invoice", response_model=InvoiceResult)
def generate_invoice(
    booking_id: int,
    receipt_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Issue an invoice number for a receipt; repeated calls return the same number"""
    try:
        booking = BookingService(db, storage, current_user).get_booking(booking_id)
        receipt, issued = ReceiptService(db, current_user.agency_id).generate_invoice(booking, receipt_id)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error("generate invoice", e)

    message = "Invoice generated successfully." if issued else "Invoice already generated."
    return InvoiceResult(message=message, receipt=receipt)

# Vehicle Booking Endpoints
@router.get("/{booking_id}/vehicle-bookings", response_model=List[VehicleBooking])
def get_vehicle_bookings(
    booking_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    try:
        booking = BookingService(db, storage, current_user).get_booking(booking_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return VehicleBookingService(db, current_user.agency_id).list_vehicle_bookings(booking)

@router.post("/{booking_id}/vehicle-bookings", response_model=VehicleBooking, status_code=status.HTTP_201_CREATED)
def create_vehicle_booking(
    booking_id: int,
    request: VehicleBookingCreate,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Book vehicles for a booking and issue an HRV voucher number"""
    try:
        booking = BookingService(db, storage, current_user).get_booking(booking_id)
        return VehicleBookingService(db, current_user.agency_id).create_vehicle_booking(booking, request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error("create vehicle booking", e)
