"""Identity models returned by the session service."""

from pydantic import BaseModel, Field

ADMIN_ROLE = "admin"


class Actor(BaseModel):
    """An authenticated end-user or admin."""

    id: str = Field(..., description="Backend-issued identity")
    email: str | None = Field(None, description="Login email")
    name: str | None = Field(None, description="Display name")


class Session(BaseModel):
    """A session created by logging in."""

    id: str = Field(..., description="Session identifier")
    user_id: str = Field(..., description="Actor the session belongs to")
    secret: str = Field(..., description="Bearer token presented on later requests")


class Profile(BaseModel):
    """Student profile stored when an account is registered."""

    user_id: str
    full_name: str
    phone: str | None = None
