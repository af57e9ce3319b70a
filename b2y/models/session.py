"""Authenticated session model."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class Session(BaseModel):
    """Identity of the caller, passed explicitly to operations that need it."""
    user_id: str = Field(..., min_length=1)
    email: Optional[str] = None
    access_token: Optional[str] = Field(None, repr=False)

    @classmethod
    def from_auth(cls, auth_session: Any) -> "Session":
        """Build from a Supabase auth session object."""
        user = auth_session.user
        return cls(
            user_id=str(user.id),
            email=getattr(user, "email", None),
            access_token=getattr(auth_session, "access_token", None),
        )
