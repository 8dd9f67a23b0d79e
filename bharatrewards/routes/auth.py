"""Authentication routes."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr

from bharatrewards.core.exceptions import DuplicateEmailError
from bharatrewards.core.security import create_session_token, get_current_session
from bharatrewards.models import UserPublic, UserSession
from bharatrewards.services.storage_service import StorageService, get_storage


router = APIRouter(prefix="/auth", tags=["Authentication"])


# Request/Response schemas
class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, storage: StorageService = Depends(get_storage)):
    """
    Register a new user and log them in.

    - Rejects emails that are already registered (case-insensitive)
    - Returns a session token
    """
    try:
        storage.register(
            name=request.name,
            email=request.email,
            password=request.password
        )
    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    session = storage.login(request.email, request.password)

    return TokenResponse(
        access_token=create_session_token(session),
        user=session.user.to_public()
    )


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, storage: StorageService = Depends(get_storage)):
    """
    Login with email and password.

    Accounts without a password accept any password.
    """
    session = storage.login(request.email, request.password)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    return TokenResponse(
        access_token=create_session_token(session),
        user=session.user.to_public()
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    session: UserSession = Depends(get_current_session),
    storage: StorageService = Depends(get_storage)
):
    storage.logout(session.id)


@router.get("/me", response_model=UserPublic)
def get_me(session: UserSession = Depends(get_current_session)):
    """
    Get the user snapshot held by the current session.

    Protected endpoint - requires a valid session token.
    """
    return session.user.to_public()
