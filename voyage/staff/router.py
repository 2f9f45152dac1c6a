import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session
from typing import Optional

from voyage.database import get_db
from voyage.auth.dependencies import get_agency_user, require_agency_admin
from voyage.exceptions import VoyageError
from voyage.staff.schemas import (
    ActiveStatus, PasswordChange, StaffCreate, StaffList, StaffMember, StaffMessage, StaffUpdate
)
from voyage.staff.service import StaffService

logger = logging.getLogger(__name__)

router = APIRouter()

def _server_error(action: str, e: Exception) -> HTTPException:
    logger.exception("Failed to %s", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"errors": {"message": f"Failed to {action}", "details": str(e)}}
    )

@router.get("/", response_model=StaffList)
def get_staff(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", description="Search name, email or mobile"),
    active: Optional[bool] = Query(None),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    """List staff of the agency, or of the caller's branch for non-admins"""
    staff, meta = StaffService(db, current_user).list_staff(page, limit, search, active, sort_by, order)
    return StaffList(data=staff, meta=meta)

@router.post("/", response_model=StaffMember, status_code=status.HTTP_201_CREATED)
def create_staff(
    request: StaffCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        return StaffService(db, current_user).create_staff(request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error("create staff member", e)

@router.get("/{staff_id}", response_model=StaffMember)
def get_staff_member(
    staff_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    try:
        return StaffService(db, current_user).get_staff(staff_id)
    except VoyageError as e:
        raise e.to_http_exception()

@router.put("/{staff_id}", response_model=StaffMember)
def update_staff(
    staff_id: int,
    request: StaffUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        return StaffService(db, current_user).update_staff(staff_id, request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _server_error(f"update staff member {staff_id}", e)

@router.patch("/{staff_id}/password", response_model=StaffMessage)
def change_password(
    staff_id: int,
    request: PasswordChange,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        StaffService(db, current_user).change_password(staff_id, request.password)
    except VoyageError as e:
        raise e.to_http_exception()
    return StaffMessage(message="Password changed successfully")

@router.patch("/{staff_id}/status", response_model=StaffMember)
def set_active_status(
    staff_id: int,
    request: ActiveStatus,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        return StaffService(db, current_user).set_active(staff_id, request.active)
    except VoyageError as e:
        raise e.to_http_exception()

@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        StaffService(db, current_user).delete_staff(staff_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
