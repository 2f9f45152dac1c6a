"""
Document Numbering Module

Issues human-readable document numbers (``2025-26/001``) per agency, document
kind and fiscal year for bookings, group bookings, booking receipts, invoices
and vehicle hire vouchers.
"""

from .service import (
    DocumentKind, SequenceNumberService, fiscal_year_label,
    format_document_number, parse_sequence
)

__all__ = [
    "DocumentKind",
    "SequenceNumberService",
    "fiscal_year_label",
    "format_document_number",
    "parse_sequence"
]
