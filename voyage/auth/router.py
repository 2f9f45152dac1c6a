from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from voyage.database import get_db
from voyage.auth.schemas import LoginRequest, AuthResponse, User
from voyage.auth.service import UserService
from voyage.auth.utils import create_access_token
from voyage.auth.dependencies import get_current_user

router = APIRouter()

@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token"""
    user = UserService.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "agency_id": user.agency_id, "role": user.role}
    )
    return AuthResponse(access_token=access_token, token_type="bearer", user=user)

@router.get("/me", response_model=User)
def read_users_me(current_user = Depends(get_current_user)):
    """Get current user profile"""
    return current_user
