"""
Authentication Module

Supplies the authenticated principal (user with agency, branch and role) to
the rest of the API: password login issuing JWT bearer tokens and the
``get_current_user`` / ``get_agency_user`` / ``require_super_admin``
dependencies.
"""

from .router import router
from .dependencies import get_current_user, get_agency_user, require_super_admin

__all__ = [
    "router",
    "get_current_user",
    "get_agency_user",
    "require_super_admin"
]
