import logging
from typing import List

from sqlalchemy.orm import Session

from voyage.bookings.booking_service import commit_numbered
from voyage.bookings.schemas import VehicleBookingCreate
from voyage.models import Booking, VehicleBooking
from voyage.numbering import DocumentKind, SequenceNumberService

logger = logging.getLogger(__name__)


class VehicleBookingService:
    """Vehicle hire vouchers (HRV numbers) attached to a booking"""

    def __init__(self, db: Session, agency_id: int):
        self.db = db
        self.agency_id = agency_id
        self.numbers = SequenceNumberService(db)

    def list_vehicle_bookings(self, booking: Booking) -> List[VehicleBooking]:
        return (
            self.db.query(VehicleBooking)
            .filter(VehicleBooking.booking_id == booking.id, VehicleBooking.agency_id == self.agency_id)
            .order_by(VehicleBooking.id)
            .all()
        )

    def create_vehicle_booking(self, booking: Booking, request: VehicleBookingCreate) -> VehicleBooking:
        vehicle_booking = VehicleBooking(
            agency_id=self.agency_id,
            booking_id=booking.id,
            vehicle_hrv_number=self.numbers.issue_next_number(self.agency_id, DocumentKind.VEHICLE_VOUCHER),
            **request.model_dump(),
        )
        self.db.add(vehicle_booking)
        commit_numbered(self.db, vehicle_booking, "VehicleBooking", "vehicle_hrv_number")
        logger.info("Created vehicle voucher %s for booking %s",
                    vehicle_booking.vehicle_hrv_number, booking.booking_number)
        return vehicle_booking
