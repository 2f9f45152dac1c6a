"""
Tour Management Module

Tour packages offered by an agency, each with an optional image attachment.
"""

from .router import router
from .service import TourService, TOUR_ATTACHMENTS

__all__ = [
    "router",
    "TourService",
    "TOUR_ATTACHMENTS"
]
