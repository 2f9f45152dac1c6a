import logging
from datetime import date, datetime, timezone
from typing import List, Tuple

from sqlalchemy.orm import Session

from voyage.bookings.booking_service import commit_numbered
from voyage.bookings.schemas import ReceiptCreate
from voyage.exceptions import NotFoundError
from voyage.models import Booking, BookingReceipt
from voyage.numbering import DocumentKind, SequenceNumberService

logger = logging.getLogger(__name__)


class ReceiptService:
    """Payment receipts of a booking and the invoices raised against them"""

    def __init__(self, db: Session, agency_id: int):
        self.db = db
        self.agency_id = agency_id
        self.numbers = SequenceNumberService(db)

    def list_receipts(self, booking: Booking) -> List[BookingReceipt]:
        return (
            self.db.query(BookingReceipt)
            .filter(BookingReceipt.booking_id == booking.id, BookingReceipt.agency_id == self.agency_id)
            .order_by(BookingReceipt.id)
            .all()
        )

    def get_receipt(self, booking: Booking, receipt_id: int) -> BookingReceipt:
        receipt = self.db.query(BookingReceipt).filter(
            BookingReceipt.id == receipt_id,
            BookingReceipt.booking_id == booking.id,
            BookingReceipt.agency_id == self.agency_id,
        ).first()
        if not receipt:
            raise NotFoundError("Receipt", receipt_id)
        return receipt

    def create_receipt(self, booking: Booking, request: ReceiptCreate) -> BookingReceipt:
        total = request.amount + request.cgst_amount + request.sgst_amount + request.igst_amount
        receipt = BookingReceipt(
            agency_id=self.agency_id,
            booking_id=booking.id,
            receipt_number=self.numbers.issue_next_number(self.agency_id, DocumentKind.BOOKING_RECEIPT),
            receipt_date=request.receipt_date or date.today(),
            payment_mode=request.payment_mode.value,
            amount=request.amount,
            cgst_amount=request.cgst_amount,
            sgst_amount=request.sgst_amount,
            igst_amount=request.igst_amount,
            total_amount=total,
        )
        self.db.add(receipt)
        commit_numbered(self.db, receipt, "Receipt", "receipt_number")
        logger.info("Created receipt %s for booking %s", receipt.receipt_number, booking.booking_number)
        return receipt

    def generate_invoice(self, booking: Booking, receipt_id: int) -> Tuple[BookingReceipt, bool]:
        """Attach an invoice number to a receipt once.

        Returns the receipt and whether a new number was issued; a receipt
        that already has an invoice keeps it.
        """
        receipt = self.get_receipt(booking, receipt_id)
        if receipt.invoice_number:
            return receipt, False

        receipt.invoice_number = self.numbers.issue_next_number(self.agency_id, DocumentKind.INVOICE)
        receipt.invoiced_at = datetime.now(timezone.utc)
        commit_numbered(self.db, receipt, "Receipt", "invoice_number")
        logger.info("Issued invoice %s for receipt %s", receipt.invoice_number, receipt.receipt_number)
        return receipt, True
