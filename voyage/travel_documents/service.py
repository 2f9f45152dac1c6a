import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from voyage.exceptions import NotFoundError
from voyage.models import Booking, TravelDocument
from voyage.travel_documents.schemas import (
    TravelDocument as TravelDocumentSchema, TravelDocumentCreate, TravelDocumentUpdate,
    TravelDocumentWriteResult
)
from voyage.uploads import (
    DOCUMENT_TYPES, MB, AttachmentManager, AttachmentSet, FieldRule, StagingArea,
    UploadStorage, explicit_nulls, validate_multipart
)

logger = logging.getLogger(__name__)

TRAVEL_DOCUMENT_ATTACHMENTS = AttachmentSet(module="booking/travel_documents", fields=("attachment",))
TRAVEL_DOCUMENT_UPLOAD_RULES = (FieldRule("attachment", DOCUMENT_TYPES, 5 * MB),)


class TravelDocumentService:
    """Tickets, visas and other files attached to a booking"""

    def __init__(self, db: Session, storage: UploadStorage, agency_id: int):
        self.db = db
        self.agency_id = agency_id
        self.files = AttachmentManager(db, storage, TRAVEL_DOCUMENT_ATTACHMENTS)

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(
            Booking.id == booking_id, Booking.agency_id == self.agency_id
        ).first()
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def list_documents(self, booking_id: int) -> List[TravelDocumentSchema]:
        booking = self.get_booking(booking_id)
        documents = (
            self.db.query(TravelDocument)
            .filter(TravelDocument.booking_id == booking.id)
            .order_by(TravelDocument.id)
            .all()
        )
        return [self.to_schema(document) for document in documents]

    def get_document(self, document_id: int) -> TravelDocument:
        document = (
            self.db.query(TravelDocument)
            .join(Booking, TravelDocument.booking_id == Booking.id)
            .filter(TravelDocument.id == document_id, Booking.agency_id == self.agency_id)
            .first()
        )
        if not document:
            raise NotFoundError("Travel document", document_id)
        return document

    def create_document(self, booking_id: int, raw_data: Optional[str],
                        staging: StagingArea) -> TravelDocumentWriteResult:
        with staging:
            payload = validate_multipart(TravelDocumentCreate, raw_data, staging)
            booking = self.get_booking(booking_id)
            document = TravelDocument(booking_id=booking.id, **payload.model_dump())
            warnings = self.files.create(document, staging)
            logger.info("Added travel document %s to booking %s", document.id, booking.booking_number)
            return TravelDocumentWriteResult(
                message="Travel document created successfully.",
                travel_document=self.to_schema(document),
                warnings=warnings,
            )

    def update_document(self, document_id: int, raw_data: Optional[str],
                        staging: StagingArea) -> TravelDocumentWriteResult:
        with staging:
            payload = validate_multipart(TravelDocumentUpdate, raw_data, staging)
            document = self.get_document(document_id)
            changes = payload.model_dump(exclude_unset=True)
            outcome = self.files.update(
                document, changes, explicit_nulls(payload, TRAVEL_DOCUMENT_ATTACHMENTS.fields), staging
            )
            return TravelDocumentWriteResult(
                message="Travel document updated successfully." if outcome.changed else "No changes applied.",
                travel_document=self.to_schema(outcome.entity),
                warnings=outcome.warnings,
            )

    def delete_document(self, document_id: int) -> None:
        document = self.get_document(document_id)
        self.files.delete(document)
        logger.info("Deleted travel document %s", document_id)

    def to_schema(self, document: TravelDocument) -> TravelDocumentSchema:
        return TravelDocumentSchema.model_validate(document).model_copy(update=self.files.file_urls(document))
