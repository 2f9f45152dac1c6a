"""
Branch Management Module

Offices of an agency. Staff and bookings are attached to a branch.
"""

from .router import router
from .service import BranchService

__all__ = [
    "router",
    "BranchService"
]
