"""
Client Management Module

Travellers an agency books for; searchable by name, mobile, email and address.
"""

from .router import router
from .service import ClientService

__all__ = [
    "router",
    "ClientService"
]
