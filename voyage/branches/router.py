import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session

from voyage.database import get_db
from voyage.auth.dependencies import get_agency_user, require_agency_admin
from voyage.exceptions import VoyageError
from voyage.branches.schemas import Branch, BranchCreate, BranchList, BranchUpdate
from voyage.branches.service import BranchService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=BranchList)
def get_branches(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", description="Search branch name, address or contact"),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    """List the agency's branches"""
    branches, meta = BranchService(db, current_user.agency_id).list_branches(page, limit, search, sort_by, order)
    return BranchList(data=branches, meta=meta)

@router.post("/", response_model=Branch, status_code=status.HTTP_201_CREATED)
def create_branch(
    request: BranchCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        return BranchService(db, current_user.agency_id).create_branch(request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to create branch")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to create branch", "details": str(e)}}
        )

@router.get("/{branch_id}", response_model=Branch)
def get_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_agency_user)
):
    try:
        return BranchService(db, current_user.agency_id).get_branch(branch_id)
    except VoyageError as e:
        raise e.to_http_exception()

@router.put("/{branch_id}", response_model=Branch)
def update_branch(
    branch_id: int,
    request: BranchUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        return BranchService(db, current_user.agency_id).update_branch(branch_id, request)
    except VoyageError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception("Failed to update branch %s", branch_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"errors": {"message": "Failed to update branch", "details": str(e)}}
        )

@router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_agency_admin)
):
    try:
        BranchService(db, current_user.agency_id).delete_branch(branch_id)
    except VoyageError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
