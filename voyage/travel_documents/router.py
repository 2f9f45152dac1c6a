import logging
from fastapi import APIRouter, Depends, HTTPException, status, File, Form, UploadFile, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from voyage.database import get_db
from voyage.auth.dependencies import get_agency_user
from voyage.exceptions import VoyageError
from voyage.travel_documents.schemas import TravelDocument, TravelDocumentWriteResult
from voyage.travel_documents.service import TravelDocumentService, TRAVEL_DOCUMENT_UPLOAD_RULES
from voyage.uploads import UploadStorage, get_upload_storage, stage_uploads

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/bookings/{booking_id}/travel-documents", response_model=List[TravelDocument])
def get_travel_documents(
    booking_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """List the travel documents of a booking"""
    try:
        return TravelDocumentService(db, storage, current_user.agency_id).list_documents(booking_id)
    except VoyageError as e:
        raise e.to_http_exception()

@router.post(
    "/bookings/{booking_id}/travel-documents",
    response_model=TravelDocumentWriteResult,
    status_code=status.HTTP_201_CREATED
)
def create_travel_document(
    booking_id: int,
    data: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Attach a document (jpeg, png or pdf up to 5MB) to a booking"""
    staging = stage_uploads(storage, {"attachment": attachment}, TRAVEL_DOCUMENT_UPLOAD_RULES)

    try:
        return TravelDocumentService(db, storage, current_user.agency_id).create_document(booking_id, data, staging)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to create travel document")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to create travel document", "details": str(e)}}
        )

@router.get("/travel-documents/{document_id}", response_model=TravelDocument)
def get_travel_document(
    document_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    service = TravelDocumentService(db, storage, current_user.agency_id)
    try:
        return service.to_schema(service.get_document(document_id))
    except VoyageError as e:
        raise e.to_http_exception()

@router.put("/travel-documents/{document_id}", response_model=TravelDocumentWriteResult)
def update_travel_document(
    document_id: int,
    data: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    """Update a travel document; send ``"attachment": null`` to remove its file"""
    staging = stage_uploads(storage, {"attachment": attachment}, TRAVEL_DOCUMENT_UPLOAD_RULES)

    try:
        return TravelDocumentService(db, storage, current_user.agency_id).update_document(document_id, data, staging)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to update travel document %s", document_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to update travel document", "details": str(e)}}
        )

@router.delete("/travel-documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_travel_document(
    document_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(get_agency_user)
):
    try:
        TravelDocumentService(db, storage, current_user.agency_id).delete_document(document_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
