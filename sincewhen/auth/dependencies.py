"""FastAPI dependencies for authentication."""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from sincewhen.auth.jwt import get_user_id_from_token
from sincewhen.database.database import get_db
from sincewhen.database.user_repository import UserRepository
from sincewhen.models.user import User

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the bearer token to a user, or None when absent or invalid."""
    if not credentials:
        return None
    user_id = get_user_id_from_token(credentials.credentials)
    if user_id is None:
        return None
    return UserRepository(db).get(user_id)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Get current authenticated user.

    Raises:
        HTTPException: 401 if the token is missing, invalid or names no user
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
