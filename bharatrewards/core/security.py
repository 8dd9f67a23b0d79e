"""Session tokens and request dependencies for the current session."""
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from bharatrewards.core.config import settings
from bharatrewards.models import UserRole, UserSession
from bharatrewards.services.storage_service import StorageService, get_storage


# JWT bearer token scheme
security = HTTPBearer()


def create_access_token(data: dict) -> str:
    """Create a JWT access token that expires with the session lifetime."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def create_session_token(session: UserSession) -> str:
    """Token carrying the session id; the session itself stays in storage."""
    return create_access_token(data={"sub": session.user.id, "sid": session.id})


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    storage: StorageService = Depends(get_storage)
) -> UserSession:
    """
    Dependency resolving the caller's session from the bearer token.

    Usage:
        @router.get("/protected")
        def protected_route(session: UserSession = Depends(get_current_session)):
            return {"user_id": session.user.id}
    """
    payload = decode_token(credentials.credentials)

    session_id: str = payload.get("sid")
    if session_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = storage.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or logged out",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


def require_admin(session: UserSession = Depends(get_current_session)) -> UserSession:
    if session.user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return session
