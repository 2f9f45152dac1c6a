"""
Per-agency document numbering.

Numbers look like ``2025-26/007``: the fiscal year label (April to March)
followed by a zero-padded sequence that restarts every fiscal year. Each
(agency, document kind, fiscal year) owns one row in ``document_sequences``
which is bumped with a single ``UPDATE ... SET last_issued = last_issued + 1``
inside the caller's transaction. The row lock taken by that UPDATE serialises
concurrent issuers, and rolling back the document also rolls back the number.
"""
import logging
import re
from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voyage.config import settings
from voyage.exceptions import NumberingError
from voyage.models import Booking, BookingReceipt, DocumentSequence, GroupBooking, VehicleBooking

logger = logging.getLogger(__name__)

_SEQUENCE_RE = re.compile(r"/(\d+)$")


class DocumentKind(str, Enum):
    """Document families that carry their own number series"""
    BOOKING = "booking"
    GROUP_BOOKING = "group_booking"
    BOOKING_RECEIPT = "booking_receipt"
    INVOICE = "invoice"
    VEHICLE_VOUCHER = "vehicle_voucher"


# kind -> (model, number column, recency column); used to seed a new counter
# from numbers issued before the counter table existed
_NUMBERED_COLUMNS = {
    DocumentKind.BOOKING: (Booking, Booking.booking_number, Booking.created_at),
    DocumentKind.GROUP_BOOKING: (GroupBooking, GroupBooking.group_booking_number, GroupBooking.created_at),
    DocumentKind.BOOKING_RECEIPT: (BookingReceipt, BookingReceipt.receipt_number, BookingReceipt.created_at),
    DocumentKind.INVOICE: (BookingReceipt, BookingReceipt.invoice_number, BookingReceipt.invoiced_at),
    DocumentKind.VEHICLE_VOUCHER: (VehicleBooking, VehicleBooking.vehicle_hrv_number, VehicleBooking.created_at),
}


def fiscal_year_label(on_date: Optional[date] = None, start_month: Optional[int] = None) -> str:
    """Return the fiscal year label for a date, e.g. 2025-02-15 -> '2024-25'."""
    on_date = on_date or date.today()
    start_month = start_month or settings.FISCAL_YEAR_START_MONTH
    start_year = on_date.year if on_date.month >= start_month else on_date.year - 1
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def format_document_number(label: str, sequence: int) -> str:
    return f"{label}/{sequence:03d}"


def parse_sequence(document_number: Optional[str]) -> Optional[int]:
    """Numeric suffix after the slash, or None when absent or malformed."""
    if not document_number:
        return None
    match = _SEQUENCE_RE.search(document_number)
    return int(match.group(1)) if match else None


class SequenceNumberService:
    """Issues gapless, per-agency document numbers inside a caller's transaction"""

    def __init__(self, db: Session):
        self.db = db

    def issue_next_number(self, agency_id: int, kind: DocumentKind, today: Optional[date] = None) -> str:
        """Reserve and return the next number for ``kind``.

        Must run in the same session that inserts the numbered row; nothing is
        committed here.
        """
        if not agency_id or agency_id < 1:
            raise NumberingError(f"Cannot issue a {kind.value} number without an agency", code="NO_AGENCY")

        label = fiscal_year_label(today)
        self._ensure_counter(agency_id, kind, label)

        result = self.db.execute(
            update(DocumentSequence)
            .where(
                DocumentSequence.agency_id == agency_id,
                DocumentSequence.document_kind == kind.value,
                DocumentSequence.fiscal_year == label,
            )
            .values(last_issued=DocumentSequence.last_issued + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NumberingError(
                f"Sequence row missing for {kind.value} {label} (agency {agency_id})",
                code="SEQUENCE_MISSING",
            )

        sequence = self.db.execute(
            select(DocumentSequence.last_issued).where(
                DocumentSequence.agency_id == agency_id,
                DocumentSequence.document_kind == kind.value,
                DocumentSequence.fiscal_year == label,
            )
        ).scalar_one()

        number = format_document_number(label, sequence)
        logger.debug("Issued %s number %s for agency %s", kind.value, number, agency_id)
        return number

    def find_latest_by_prefix(self, agency_id: int, kind: DocumentKind, prefix: str) -> Optional[str]:
        """Most recently created document number of ``kind`` starting with ``prefix``."""
        model, number_column, order_column = _NUMBERED_COLUMNS[kind]
        return self.db.execute(
            select(number_column)
            .where(
                model.agency_id == agency_id,
                number_column.isnot(None),
                number_column.startswith(prefix, autoescape=True),
            )
            .order_by(order_column.desc(), model.id.desc())
            .limit(1)
        ).scalar_one_or_none()

    def current_sequence(self, agency_id: int, kind: DocumentKind, today: Optional[date] = None) -> int:
        """Last issued sequence for the fiscal year containing ``today`` (0 if none)."""
        value = self.db.execute(
            select(DocumentSequence.last_issued).where(
                DocumentSequence.agency_id == agency_id,
                DocumentSequence.document_kind == kind.value,
                DocumentSequence.fiscal_year == fiscal_year_label(today),
            )
        ).scalar_one_or_none()
        return value or 0

    def _ensure_counter(self, agency_id: int, kind: DocumentKind, label: str) -> None:
        exists = self.db.execute(
            select(DocumentSequence.id).where(
                DocumentSequence.agency_id == agency_id,
                DocumentSequence.document_kind == kind.value,
                DocumentSequence.fiscal_year == label,
            )
        ).first()
        if exists:
            return

        seed = parse_sequence(self.find_latest_by_prefix(agency_id, kind, f"{label}/")) or 0
        values = {
            "agency_id": agency_id,
            "document_kind": kind.value,
            "fiscal_year": label,
            "last_issued": seed,
        }
        dialect = self.db.get_bind().dialect.name

        if dialect in ("postgresql", "sqlite"):
            if dialect == "postgresql":
                from sqlalchemy.dialects.postgresql import insert
            else:
                from sqlalchemy.dialects.sqlite import insert
            # A concurrent creator wins silently; both then increment the same row
            self.db.execute(insert(DocumentSequence).values(**values).on_conflict_do_nothing())
        else:
            try:
                with self.db.begin_nested():
                    self.db.add(DocumentSequence(**values))
            except IntegrityError:
                logger.info("Sequence %s %s for agency %s created concurrently", kind.value, label, agency_id)

        if seed:
            logger.info("Seeded %s sequence %s for agency %s at %s", kind.value, label, agency_id, seed)
