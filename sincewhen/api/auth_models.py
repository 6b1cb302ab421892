"""Request/response models for authentication endpoints."""

from pydantic import BaseModel, Field

from sincewhen.models.user import User


class GoogleLoginRequest(BaseModel):
    """Request model for Google login."""
    id_token: str = Field(..., description="Google ID token from the sign-in flow")


class AuthResponse(BaseModel):
    """Response model for authentication."""
    access_token: str
    token_type: str = "bearer"
    user: User
