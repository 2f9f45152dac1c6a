import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, File, Form, UploadFile, Response
from sqlalchemy.orm import Session
from typing import Optional

from voyage.database import get_db
from voyage.auth.dependencies import require_super_admin
from voyage.exceptions import VoyageError
from voyage.agencies.schemas import Agency, AgencyList, AgencyWriteResult
from voyage.agencies.service import AgencyService, AGENCY_UPLOAD_RULES
from voyage.uploads import UploadStorage, get_upload_storage, stage_uploads

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=AgencyList)
def get_agencies(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Agencies per page"),
    search: str = Query("", description="Search business or contact person name"),
    sort_by: str = Query("id", description="Field to sort by"),
    order: str = Query("asc", description="asc or desc"),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(require_super_admin)
):
    """List agencies with pagination, sorting and search"""
    agencies, meta = AgencyService(db, storage).list_agencies(page, limit, search, sort_by, order)
    return AgencyList(data=agencies, meta=meta)

@router.post("/", response_model=AgencyWriteResult, status_code=status.HTTP_201_CREATED)
def create_agency(
    data: Optional[str] = Form(None, description="JSON document with the agency fields"),
    logo: Optional[UploadFile] = File(None),
    letterhead: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(require_super_admin)
):
    """Create an agency with optional logo and letterhead"""
    staging = stage_uploads(storage, {"logo": logo, "letterhead": letterhead}, AGENCY_UPLOAD_RULES)

    try:
        return AgencyService(db, storage).create_agency(data, staging)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to create agency")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to create agency", "details": str(e)}}
        )

@router.get("/{agency_id}", response_model=Agency)
def get_agency(
    agency_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(require_super_admin)
):
    """Get agency by ID"""
    service = AgencyService(db, storage)
    try:
        return service.to_schema(service.get_agency(agency_id))
    except VoyageError as e:
        raise e.to_http_exception()

@router.put("/{agency_id}", response_model=AgencyWriteResult)
def update_agency(
    agency_id: int,
    data: Optional[str] = Form(None, description="JSON document; set logo/letterhead to null to remove"),
    logo: Optional[UploadFile] = File(None),
    letterhead: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(require_super_admin)
):
    """Update an agency, replacing or removing its files"""
    staging = stage_uploads(storage, {"logo": logo, "letterhead": letterhead}, AGENCY_UPLOAD_RULES)

    try:
        return AgencyService(db, storage).update_agency(agency_id, data, staging)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to update agency %s", agency_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to update agency", "details": str(e)}}
        )

@router.delete("/{agency_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_agency(
    agency_id: int,
    db: Session = Depends(get_db),
    storage: UploadStorage = Depends(get_upload_storage),
    current_user = Depends(require_super_admin)
):
    """Delete an agency and its files"""
    try:
        AgencyService(db, storage).delete_agency(agency_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
