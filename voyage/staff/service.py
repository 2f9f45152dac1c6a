import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voyage.auth.dependencies import ADMIN
from voyage.auth.utils import get_password_hash
from voyage.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from voyage.models import Branch, User
from voyage.pagination import PageMeta, paginate, search_filter, sort_query
from voyage.staff.schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("id", "name", "email", "role", "created_at")


class StaffService:
    """Users (staff members) of the current user's agency"""

    def __init__(self, db: Session, current_user: User):
        self.db = db
        self.current_user = current_user
        self.agency_id = current_user.agency_id

    def list_staff(self, page: int = 1, limit: int = 10, search: str = "", active: Optional[bool] = None,
                   sort_by: str = "id", order: str = "asc") -> Tuple[List[User], PageMeta]:
        """Agency admins see every branch; other users only their own"""
        query = self.db.query(User).filter(User.agency_id == self.agency_id)
        if self.current_user.role != ADMIN and self.current_user.branch_id:
            query = query.filter(User.branch_id == self.current_user.branch_id)
        if active is not None:
            query = query.filter(User.active == active)
        query = search_filter(query, search, [User.name, User.email, User.mobile])
        query = sort_query(query, User, sort_by, order, SORTABLE_COLUMNS)
        return paginate(query, page, limit)

    def get_staff(self, staff_id: int) -> User:
        staff = self.db.query(User).filter(User.id == staff_id, User.agency_id == self.agency_id).first()
        if not staff:
            raise NotFoundError("Staff member", staff_id)
        return staff

    def create_staff(self, payload: StaffCreate) -> User:
        self._check_branch(payload.branch_id)
        self._check_email(payload.email)

        staff = User(
            agency_id=self.agency_id,
            **payload.model_dump(exclude={"password"}),
            password=get_password_hash(payload.password),
        )
        self.db.add(staff)
        self._commit(payload.email)
        self.db.refresh(staff)
        logger.info("Created staff member %s for agency %s", staff.id, self.agency_id)
        return staff

    def update_staff(self, staff_id: int, payload: StaffUpdate) -> User:
        staff = self.get_staff(staff_id)
        changes = payload.model_dump(exclude_unset=True)
        if "branch_id" in changes:
            self._check_branch(changes["branch_id"])
        new_email = changes.get("email")
        if new_email and new_email != staff.email:
            self._check_email(new_email, exclude_id=staff.id)
        if changes.get("active") is False:
            self._check_not_self(staff, "deactivate")

        for key, value in changes.items():
            setattr(staff, key, value)
        self._commit(new_email)
        self.db.refresh(staff)
        return staff

    def change_password(self, staff_id: int, password: str) -> None:
        staff = self.get_staff(staff_id)
        staff.password = get_password_hash(password)
        self._commit()
        logger.info("Password changed for staff member %s", staff_id)

    def set_active(self, staff_id: int, active: bool) -> User:
        staff = self.get_staff(staff_id)
        if not active:
            self._check_not_self(staff, "deactivate")
        staff.active = active
        self._commit()
        self.db.refresh(staff)
        logger.info("Staff member %s %s", staff_id, "activated" if active else "deactivated")
        return staff

    def delete_staff(self, staff_id: int) -> None:
        staff = self.get_staff(staff_id)
        self._check_not_self(staff, "delete")
        self.db.delete(staff)
        self._commit()
        logger.info("Deleted staff member %s", staff_id)

    def _check_branch(self, branch_id: int) -> None:
        exists = self.db.query(Branch).filter(Branch.id == branch_id, Branch.agency_id == self.agency_id).first()
        if not exists:
            raise ValidationError(errors={"branch_id": [f"Branch with ID {branch_id} not found."]})

    def _check_email(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(User).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError("User", "email", email)

    def _check_not_self(self, staff: User, action: str) -> None:
        if staff.id == self.current_user.id:
            raise PermissionDeniedError(f"You cannot {action} your own account.")

    def _commit(self, email: Optional[str] = None) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User", "email", email)
        except Exception:
            self.db.rollback()
            raise
