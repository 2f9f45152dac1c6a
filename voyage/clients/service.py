import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from voyage.clients.schemas import ClientCreate, ClientUpdate
from voyage.exceptions import ConflictError, NotFoundError
from voyage.models import Booking, Client
from voyage.pagination import PageMeta, paginate, search_filter, sort_query

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("id", "client_name", "email", "created_at")


class ClientService:
    """Clients (travellers) of one agency"""

    def __init__(self, db: Session, agency_id: int):
        self.db = db
        self.agency_id = agency_id

    def list_clients(self, page: int = 1, limit: int = 10, search: str = "",
                     sort_by: str = "id", order: str = "asc") -> Tuple[List[Client], PageMeta]:
        query = self.db.query(Client).filter(Client.agency_id == self.agency_id)
        query = search_filter(query, search, [Client.client_name, Client.mobile, Client.email, Client.address1])
        query = sort_query(query, Client, sort_by, order, SORTABLE_COLUMNS)
        return paginate(query, page, limit)

    def get_client(self, client_id: int) -> Client:
        client = self.db.query(Client).filter(Client.id == client_id, Client.agency_id == self.agency_id).first()
        if not client:
            raise NotFoundError("Client", client_id)
        return client

    def create_client(self, payload: ClientCreate) -> Client:
        client = Client(agency_id=self.agency_id, **payload.model_dump())
        self.db.add(client)
        self._commit()
        self.db.refresh(client)
        logger.info("Created client %s for agency %s", client.id, self.agency_id)
        return client

    def update_client(self, client_id: int, payload: ClientUpdate) -> Client:
        client = self.get_client(client_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(client, key, value)
        self._commit()
        self.db.refresh(client)
        return client

    def delete_client(self, client_id: int) -> None:
        """Delete a client that has no bookings"""
        client = self.get_client(client_id)
        bookings = self.db.query(Booking).filter(Booking.client_id == client.id).count()
        if bookings:
            raise ConflictError(
                message=f"Client with ID {client_id} has {bookings} booking(s) and cannot be deleted."
            )
        self.db.delete(client)
        self._commit()
        logger.info("Deleted client %s", client_id)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
