import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session

from voyage.database import get_db
from voyage.auth.dependencies import get_agency_user
from voyage.exceptions import VoyageError
from voyage.clients.schemas import Client, ClientCreate, ClientList, ClientUpdate
from voyage.clients.service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=ClientList)
def get_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", description="Search client name, mobile, email or address"),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    """List the agency's clients"""
    clients, meta = ClientService(db, current_user.agency_id).list_clients(page, limit, search, sort_by, order)
    return ClientList(data=clients, meta=meta)

@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
def create_client(
    request: ClientCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    try:
        return ClientService(db, current_user.agency_id).create_client(request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to create client")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to create client", "details": str(e)}}
        )

@router.get("/{client_id}", response_model=Client)
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    try:
        return ClientService(db, current_user.agency_id).get_client(client_id)
    except VoyageError as e:
        raise e.to_http_exception()

@router.put("/{client_id}", response_model=Client)
def update_client(
    client_id: int,
    request: ClientUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    try:
        return ClientService(db, current_user.agency_id).update_client(client_id, request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to update client %s", client_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to update client", "details": str(e)}}
        )

@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    """Delete a client; clients with bookings are kept"""
    try:
        ClientService(db, current_user.agency_id).delete_client(client_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
