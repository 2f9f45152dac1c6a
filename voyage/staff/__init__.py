"""
Staff Management Module

Users of an agency: creation with a hashed password, role and branch,
password changes and activation.
"""

from .router import router
from .service import StaffService

__all__ = [
    "router",
    "StaffService"
]
