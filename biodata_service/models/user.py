from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .identifiers import PyObjectId


class Role(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    ADMIN = "admin"


def normalize_email(value: str) -> str:
    text = (value or "").strip().lower()
    if not text or "@" not in text:
        raise ValueError("a valid email is required")
    return text


class UserCreateRequest(BaseModel):
    """Payload for registering a user after the identity provider sign-up."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    email: str
    name: Optional[str] = Field(default=None, max_length=120)
    photo_url: Optional[str] = Field(default=None, alias="photoURL")

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)


class UserDocument(BaseModel):
    """User document stored in the ``users`` collection."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    email: str
    name: Optional[str] = None
    role: Role = Role.BASIC

    @field_validator("role", mode="before")
    @classmethod
    def _known_role(cls, value: Any) -> Any:
        # Unset or unrecognised roles carry no privileges.
        if isinstance(value, Role):
            return value
        try:
            return Role(str(value).strip().lower())
        except ValueError:
            return Role.BASIC


class UserListItem(UserDocument):
    """User row in the admin listing, denormalized with the profile's premium request flag."""

    premium_requested: bool = Field(default=False, alias="premiumRequested")


class RoleResponse(BaseModel):
    role: Optional[Role] = None


class UserCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    message: str
    inserted_id: PyObjectId = Field(alias="insertedId")


class RoleChangeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    message: str
    user_id: PyObjectId = Field(alias="userId")
    role: Role


__all__ = [
    "Role",
    "RoleChangeResponse",
    "RoleResponse",
    "UserCreateRequest",
    "UserCreatedResponse",
    "UserDocument",
    "UserListItem",
    "normalize_email",
]
