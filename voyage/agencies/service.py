import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voyage.agencies.schemas import Agency as AgencySchema, AgencyCreate, AgencyUpdate, AgencyWriteResult
from voyage.auth.dependencies import ADMIN
from voyage.auth.utils import get_password_hash
from voyage.exceptions import ConflictError, NotFoundError
from voyage.models import Agency, User
from voyage.pagination import PageMeta, paginate, search_filter, sort_query
from voyage.uploads import (
    IMAGE_TYPES, MB, AttachmentManager, AttachmentSet, FieldRule, StagingArea,
    UploadStorage, explicit_nulls, validate_multipart
)
from voyage.tours.service import TOUR_ATTACHMENTS
from voyage.travel_documents.service import TRAVEL_DOCUMENT_ATTACHMENTS

logger = logging.getLogger(__name__)

AGENCY_ATTACHMENTS = AttachmentSet(module="agency", fields=("logo", "letterhead"))
AGENCY_UPLOAD_RULES = (
    FieldRule("logo", IMAGE_TYPES, 2 * MB),
    FieldRule("letterhead", IMAGE_TYPES, 2 * MB),
)
SORTABLE_COLUMNS = ("id", "business_name", "contact_person_name", "created_at")


class AgencyService:
    """Agency (tenant) management including logo and letterhead files"""

    def __init__(self, db: Session, storage: UploadStorage):
        self.db = db
        self.storage = storage
        self.files = AttachmentManager(db, storage, AGENCY_ATTACHMENTS)

    def list_agencies(self, page: int = 1, limit: int = 10, search: str = "",
                      sort_by: str = "id", order: str = "asc") -> Tuple[List[AgencySchema], PageMeta]:
        query = search_filter(
            self.db.query(Agency), search, [Agency.business_name, Agency.contact_person_name]
        )
        query = sort_query(query, Agency, sort_by, order, SORTABLE_COLUMNS)
        agencies, meta = paginate(query, page, limit)
        return [self.to_schema(agency) for agency in agencies], meta

    def get_agency(self, agency_id: int) -> Agency:
        agency = self.db.query(Agency).filter(Agency.id == agency_id).first()
        if not agency:
            raise NotFoundError("Agency", agency_id)
        return agency

    def create_agency(self, raw_data: Optional[str], staging: StagingArea) -> AgencyWriteResult:
        with staging:
            payload = validate_multipart(AgencyCreate, raw_data, staging)
            self._check_contact_email(payload.contact_person_email)
            if payload.user and self.db.query(User).filter(User.email == payload.user.email).first():
                raise ConflictError(
                    message=f"User with email {payload.user.email} already exists.",
                    errors={"user.email": [f"User with email {payload.user.email} already exists."]},
                )

            agency = Agency(**payload.model_dump(exclude={"user"}))
            if payload.user:
                agency.users.append(User(
                    name=payload.user.name,
                    email=payload.user.email,
                    password=get_password_hash(payload.user.password),
                    role=ADMIN,
                ))

            try:
                warnings = self.files.create(agency, staging)
            except IntegrityError:
                raise ConflictError("Agency", "contact_person_email", payload.contact_person_email)

            logger.info("Created agency %s (%s)", agency.id, agency.business_name)
            return AgencyWriteResult(
                message="Agency created successfully.",
                agency=self.to_schema(agency),
                warnings=warnings,
            )

    def update_agency(self, agency_id: int, raw_data: Optional[str], staging: StagingArea) -> AgencyWriteResult:
        with staging:
            payload = validate_multipart(AgencyUpdate, raw_data, staging)
            agency = self.get_agency(agency_id)

            changes = payload.model_dump(exclude_unset=True)
            new_email = changes.get("contact_person_email")
            if new_email and new_email != agency.contact_person_email:
                self._check_contact_email(new_email, exclude_id=agency.id)

            try:
                outcome = self.files.update(
                    agency, changes, explicit_nulls(payload, AGENCY_ATTACHMENTS.fields), staging
                )
            except IntegrityError:
                raise ConflictError("Agency", "contact_person_email", new_email)

            return AgencyWriteResult(
                message="Agency updated successfully." if outcome.changed else "No changes applied.",
                agency=self.to_schema(outcome.entity),
                warnings=outcome.warnings,
            )

    def delete_agency(self, agency_id: int) -> None:
        """Delete the agency with everything it owns, then its upload folders"""
        agency = self.get_agency(agency_id)
        tour_ids = [tour.upload_uuid for tour in agency.tours if tour.upload_uuid]
        document_ids = [
            document.upload_uuid
            for booking in agency.bookings
            for document in booking.travel_documents
            if document.upload_uuid
        ]

        self.files.delete(agency)

        tours = AttachmentManager(self.db, self.storage, TOUR_ATTACHMENTS)
        for storage_id in tour_ids:
            tours.remove_files(storage_id)
        documents = AttachmentManager(self.db, self.storage, TRAVEL_DOCUMENT_ATTACHMENTS)
        for storage_id in document_ids:
            documents.remove_files(storage_id)
        logger.info("Deleted agency %s (%d tour, %d travel document folders)",
                    agency_id, len(tour_ids), len(document_ids))

    def to_schema(self, agency: Agency) -> AgencySchema:
        return AgencySchema.model_validate(agency).model_copy(update=self.files.file_urls(agency))

    def _check_contact_email(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Agency).filter(Agency.contact_person_email == email)
        if exclude_id is not None:
            query = query.filter(Agency.id != exclude_id)
        if query.first():
            raise ConflictError("Agency", "contact_person_email", email)
