import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, File, Form, UploadFile, Response
from sqlalchemy.orm import Session
from typing import Optional

from voyage.database import get_db
from voyage.auth.dependencies import get_agency_user
from voyage.exceptions import VoyageError
from voyage.tours.schemas import Tour, TourList, TourWriteResult
from voyage.tours.service import TourService, TOUR_UPLOAD_RULES
from voyage.uploads import UploadStorage, get_upload_storage, stage_uploads

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=TourList)
def get_tours(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", description="Search tour title or destination"),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """List the agency's tours"""
    tours, meta = TourService(db, storage, current_user.agency_id).list_tours(page, limit, search, sort_by, order)
    return TourList(data=tours, meta=meta)

@router.post("/", response_model=TourWriteResult, status_code=status.HTTP_201_CREATED)
def create_tour(
    data: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Create a tour with an optional attachment"""
    staging = stage_uploads(storage, {"attachment": attachment}, TOUR_UPLOAD_RULES)

    try:
        return TourService(db, storage, current_user.agency_id).create_tour(data, staging)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to create tour")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to create tour", "details": str(e)}}
        )

@router.get("/{tour_id}", response_model=Tour)
def get_tour(
    tour_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    service = TourService(db, storage, current_user.agency_id)
    try:
        return service.to_schema(service.get_tour(tour_id))
    except VoyageError as e:
        raise e.to_http_exception()

@router.put("/{tour_id}", response_model=TourWriteResult)
def update_tour(
    tour_id: int,
    data: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Update a tour; send ``"attachment": null`` to remove its file"""
    staging = stage_uploads(storage, {"attachment": attachment}, TOUR_UPLOAD_RULES)

    try:
        return TourService(db, storage, current_user.agency_id).update_tour(tour_id, data, staging)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to update tour %s", tour_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to update tour", "details": str(e)}}
        )

@router.delete("/{tour_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tour(
    tour_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    try:
        TourService(db, storage, current_user.agency_id).delete_tour(tour_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
