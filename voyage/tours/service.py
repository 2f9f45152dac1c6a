import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from voyage.exceptions import NotFoundError
from voyage.models import Tour
from voyage.pagination import PageMeta, paginate, search_filter, sort_query
from voyage.tours.schemas import Tour as TourSchema, TourCreate, TourUpdate, TourWriteResult
from voyage.uploads import (
    IMAGE_TYPES, MB, AttachmentManager, AttachmentSet, FieldRule, StagingArea,
    UploadStorage, explicit_nulls, validate_multipart
)

logger = logging.getLogger(__name__)

TOUR_ATTACHMENTS = AttachmentSet(module="tour", fields=("attachment",))
TOUR_UPLOAD_RULES = (FieldRule("attachment", IMAGE_TYPES, 2 * MB),)
SORTABLE_COLUMNS = ("id", "tour_title", "destination", "created_at")


class TourService:
    """Tour packages of one agency"""

    def __init__(self, db: Session, storage: UploadStorage, agency_id: int):
        self.db = db
        self.agency_id = agency_id
        self.files = AttachmentManager(db, storage, TOUR_ATTACHMENTS)

    def list_tours(self, page: int = 1, limit: int = 10, search: str = "",
                   sort_by: str = "id", order: str = "asc") -> Tuple[List[TourSchema], PageMeta]:
        query = self.db.query(Tour).filter(Tour.agency_id == self.agency_id)
        query = search_filter(query, search, [Tour.tour_title, Tour.destination])
        query = sort_query(query, Tour, sort_by, order, SORTABLE_COLUMNS)
        tours, meta = paginate(query, page, limit)
        return [self.to_schema(tour) for tour in tours], meta

    def get_tour(self, tour_id: int) -> Tour:
        tour = self.db.query(Tour).filter(Tour.id == tour_id, Tour.agency_id == self.agency_id).first()
        if not tour:
            raise NotFoundError("Tour", tour_id)
        return tour

    def create_tour(self, raw_data: Optional[str], staging: StagingArea) -> TourWriteResult:
        with staging:
            payload = validate_multipart(TourCreate, raw_data, staging)
            tour = Tour(agency_id=self.agency_id, **payload.model_dump(mode="json"))
            warnings = self.files.create(tour, staging)
            logger.info("Created tour %s for agency %s", tour.id, self.agency_id)
            return TourWriteResult(message="Tour created successfully.", tour=self.to_schema(tour), warnings=warnings)

    def update_tour(self, tour_id: int, raw_data: Optional[str], staging: StagingArea) -> TourWriteResult:
        with staging:
            payload = validate_multipart(TourUpdate, raw_data, staging)
            tour = self.get_tour(tour_id)
            changes = payload.model_dump(mode="json", exclude_unset=True)
            outcome = self.files.update(tour, changes, explicit_nulls(payload, TOUR_ATTACHMENTS.fields), staging)
            return TourWriteResult(
                message="Tour updated successfully." if outcome.changed else "No changes applied.",
                tour=self.to_schema(outcome.entity),
                warnings=outcome.warnings,
            )

    def delete_tour(self, tour_id: int) -> None:
        tour = self.get_tour(tour_id)
        self.files.delete(tour)
        logger.info("Deleted tour %s", tour_id)

    def to_schema(self, tour: Tour) -> TourSchema:
        return TourSchema.model_validate(tour).model_copy(update=self.files.file_urls(tour))
