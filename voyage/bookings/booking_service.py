import logging
from datetime import date
from typing import Any, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voyage.auth.dependencies import ADMIN
from voyage.bookings.schemas import Booking as BookingSchema, BookingCreate, GroupBookingCreate
from voyage.exceptions import ConflictError, NotFoundError, ValidationError
from voyage.models import Booking, Branch, Client, GroupBooking, Tour
from voyage.numbering import DocumentKind, SequenceNumberService
from voyage.pagination import PageMeta, paginate, search_filter, sort_query
from voyage.travel_documents.service import TRAVEL_DOCUMENT_ATTACHMENTS
from voyage.uploads import AttachmentManager, UploadStorage

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("id", "booking_number", "booking_date", "journey_date", "created_at")


def commit_numbered(db: Session, entity: Any, entity_name: str, number_field: str) -> None:
    """Commit a freshly numbered row; a duplicate number becomes a conflict."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        number = getattr(entity, number_field, None)
        logger.error("Duplicate %s %s %s", entity_name, number_field, number)
        raise ConflictError(entity_name, number_field, number)
    except Exception:
        db.rollback()
        raise
    db.refresh(entity)


class BookingService:
    """Bookings and group bookings of the current user's agency"""

    def __init__(self, db: Session, storage: UploadStorage, current_user):
        self.db = db
        self.storage = storage
        self.current_user = current_user
        self.agency_id = current_user.agency_id
        self.numbers = SequenceNumberService(db)

    # Bookings
    def list_bookings(self, page: int = 1, limit: int = 10, search: str = "",
                      sort_by: str = "id", order: str = "asc") -> Tuple[List[BookingSchema], PageMeta]:
        query = self.db.query(Booking).join(Client, Booking.client_id == Client.id).filter(
            Booking.agency_id == self.agency_id
        )
        query = search_filter(query, search, [Booking.booking_number, Client.client_name])
        query = sort_query(query, Booking, sort_by, order, SORTABLE_COLUMNS)
        bookings, meta = paginate(query, page, limit)
        return [self.to_schema(booking) for booking in bookings], meta

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(
            Booking.id == booking_id, Booking.agency_id == self.agency_id
        ).first()
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def create_booking(self, request: BookingCreate) -> Booking:
        client = self.db.query(Client).filter(
            Client.id == request.client_id, Client.agency_id == self.agency_id
        ).first()
        if not client:
            raise ValidationError(errors={"client_id": ["Client not found for this agency."]})
        self._check_tour(request.tour_id)

        booking = Booking(
            agency_id=self.agency_id,
            branch_id=self._resolve_branch(request.branch_id),
            client_id=client.id,
            tour_id=request.tour_id,
            booking_number=self.numbers.issue_next_number(self.agency_id, DocumentKind.BOOKING),
            booking_date=request.booking_date or date.today(),
            journey_date=request.journey_date,
            number_of_adults=request.number_of_adults,
            number_of_children=request.number_of_children,
            booking_detail=request.booking_detail,
        )
        self.db.add(booking)
        commit_numbered(self.db, booking, "Booking", "booking_number")
        logger.info("Created booking %s for agency %s", booking.booking_number, self.agency_id)
        return booking

    def delete_booking(self, booking_id: int) -> List[str]:
        """Delete a booking with its receipts, vouchers and travel documents."""
        booking = self.get_booking(booking_id)
        storage_ids = [doc.upload_uuid for doc in booking.travel_documents if doc.upload_uuid]

        self.db.delete(booking)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        documents = AttachmentManager(self.db, self.storage, TRAVEL_DOCUMENT_ATTACHMENTS)
        failures = []
        for storage_id in storage_ids:
            failures.extend(documents.remove_files(storage_id))
        logger.info("Deleted booking %s (%d travel document folders)", booking_id, len(storage_ids))
        return failures

    def to_schema(self, booking: Booking) -> BookingSchema:
        client_name = booking.client.client_name if booking.client else None
        return BookingSchema.model_validate(booking).model_copy(update={"client_name": client_name})

    # Group bookings
    def create_group_booking(self, request: GroupBookingCreate) -> GroupBooking:
        self._check_tour(request.tour_id)
        group_booking = GroupBooking(
            agency_id=self.agency_id,
            branch_id=self._resolve_branch(request.branch_id),
            tour_id=request.tour_id,
            group_booking_number=self.numbers.issue_next_number(self.agency_id, DocumentKind.GROUP_BOOKING),
            group_booking_date=request.group_booking_date or date.today(),
            journey_date=request.journey_date,
            booking_detail=request.booking_detail,
        )
        self.db.add(group_booking)
        commit_numbered(self.db, group_booking, "GroupBooking", "group_booking_number")
        logger.info("Created group booking %s for agency %s", group_booking.group_booking_number, self.agency_id)
        return group_booking

    def get_group_booking(self, group_booking_id: int) -> GroupBooking:
        group_booking = self.db.query(GroupBooking).filter(
            GroupBooking.id == group_booking_id, GroupBooking.agency_id == self.agency_id
        ).first()
        if not group_booking:
            raise NotFoundError("Group booking", group_booking_id)
        return group_booking

    def _resolve_branch(self, requested_branch_id: Optional[int]) -> Optional[int]:
        """Admins pick the branch; everyone else books for their own branch."""
        if self.current_user.role != ADMIN:
            return self.current_user.branch_id

        if not requested_branch_id:
            raise ValidationError(errors={"branch_id": ["Branch is required."]})
        branch = self.db.query(Branch).filter(
            Branch.id == requested_branch_id, Branch.agency_id == self.agency_id
        ).first()
        if not branch:
            raise ValidationError(errors={"branch_id": ["Branch not found for this agency."]})
        return branch.id

    def _check_tour(self, tour_id: Optional[int]) -> None:
        if tour_id is None:
            return
        exists = self.db.query(Tour.id).filter(Tour.id == tour_id, Tour.agency_id == self.agency_id).first()
        if not exists:
            raise ValidationError(errors={"tour_id": ["Tour not found for this agency."]})
