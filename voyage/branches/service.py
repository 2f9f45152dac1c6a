import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voyage.branches.schemas import BranchCreate, BranchUpdate
from voyage.exceptions import ConflictError, NotFoundError
from voyage.models import Booking, Branch, GroupBooking, User
from voyage.pagination import PageMeta, paginate, search_filter, sort_query

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("id", "branch_name", "created_at")


class BranchService:
    """Branches (offices) of one agency; branch names are unique per agency"""

    def __init__(self, db: Session, agency_id: int):
        self.db = db
        self.agency_id = agency_id

    def list_branches(self, page: int = 1, limit: int = 10, search: str = "",
                      sort_by: str = "id", order: str = "asc") -> Tuple[List[Branch], PageMeta]:
        query = self.db.query(Branch).filter(Branch.agency_id == self.agency_id)
        query = search_filter(query, search, [
            Branch.branch_name, Branch.address, Branch.contact_name, Branch.contact_email, Branch.contact_mobile
        ])
        query = sort_query(query, Branch, sort_by, order, SORTABLE_COLUMNS)
        return paginate(query, page, limit)

    def get_branch(self, branch_id: int) -> Branch:
        branch = self.db.query(Branch).filter(Branch.id == branch_id, Branch.agency_id == self.agency_id).first()
        if not branch:
            raise NotFoundError("Branch", branch_id)
        return branch

    def create_branch(self, payload: BranchCreate) -> Branch:
        self._check_name(payload.branch_name)
        branch = Branch(agency_id=self.agency_id, **payload.model_dump())
        self.db.add(branch)
        self._commit(payload.branch_name)
        self.db.refresh(branch)
        logger.info("Created branch %s for agency %s", branch.id, self.agency_id)
        return branch

    def update_branch(self, branch_id: int, payload: BranchUpdate) -> Branch:
        branch = self.get_branch(branch_id)
        changes = payload.model_dump(exclude_unset=True)
        new_name = changes.get("branch_name")
        if new_name and new_name != branch.branch_name:
            self._check_name(new_name, exclude_id=branch.id)

        for key, value in changes.items():
            setattr(branch, key, value)
        self._commit(new_name)
        self.db.refresh(branch)
        return branch

    def delete_branch(self, branch_id: int) -> None:
        """Delete a branch; staff and bookings of the branch are detached, not deleted"""
        branch = self.get_branch(branch_id)
        for model in (User, Booking, GroupBooking):
            self.db.query(model).filter(model.branch_id == branch.id).update(
                {model.branch_id: None}, synchronize_session=False
            )
        self.db.delete(branch)
        self._commit()
        logger.info("Deleted branch %s", branch_id)

    def _check_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Branch).filter(Branch.agency_id == self.agency_id, Branch.branch_name == name)
        if exclude_id is not None:
            query = query.filter(Branch.id != exclude_id)
        if query.first():
            raise ConflictError("Branch", "branch_name", name)

    def _commit(self, name: Optional[str] = None) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Branch", "branch_name", name)
        except Exception:
            self.db.rollback()
            raise
