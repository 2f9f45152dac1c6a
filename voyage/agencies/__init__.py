"""
Agency Management Module

Agencies are the tenants of the system. Each agency carries a logo and a
letterhead image stored under one shared upload directory.
"""

from .router import router
from .service import AgencyService, AGENCY_ATTACHMENTS, AGENCY_UPLOAD_RULES

__all__ = [
    "router",
    "AgencyService",
    "AGENCY_ATTACHMENTS",
    "AGENCY_UPLOAD_RULES"
]
