"""
Travel Documents Module

Files attached to a booking (tickets, visas, vouchers). Each document has one
``attachment`` stored under ``booking/travel_documents/attachment/<storage id>/``.
"""

from .router import router
from .service import TravelDocumentService, TRAVEL_DOCUMENT_ATTACHMENTS

__all__ = [
    "router",
    "TravelDocumentService",
    "TRAVEL_DOCUMENT_ATTACHMENTS"
]
