from typing import Optional

from sqlalchemy.orm import Session

from voyage.auth.utils import verify_password
from voyage.models import User

class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """Authenticate an active user with email and password"""
        user = UserService.get_user_by_email(db, email)
        if not user or not user.active:
            return None
        if not verify_password(password, user.password):
            return None
        return user
