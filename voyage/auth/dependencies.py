from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from voyage.config import settings
from voyage.database import get_db
from voyage.auth.utils import verify_token
from voyage.auth.service import UserService

SUPER_ADMIN = "super_admin"
ADMIN = "admin"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    """Get current authenticated user"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = verify_token(token, credentials_exception)

    user = UserService.get_user_by_id(db, user_id=token_data["user_id"])
    if user is None or not user.active:
        raise credentials_exception

    return user

def get_agency_user(current_user = Depends(get_current_user)):
    """Require a user that belongs to an agency (the tenant)"""
    if not current_user.agency_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"errors": {"message": "User does not belong to any Agency"}}
        )
    return current_user

def require_super_admin(current_user = Depends(get_current_user)):
    """Require the platform-level super admin role"""
    if current_user.role != SUPER_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user

def require_agency_admin(current_user = Depends(get_agency_user)):
    """Require the admin role within the user's own agency"""
    if current_user.role != ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user
