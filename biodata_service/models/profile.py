from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .identifiers import PyObjectId


class BiodataType(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class PremiumState(str, Enum):
    NOT_REQUESTED = "NotRequested"
    REQUESTED = "Requested"
    APPROVED = "Approved"


# Fields owned by the registry and the premium workflow; never accepted from clients.
PROTECTED_PROFILE_FIELDS = ("_id", "id", "biodataId", "premiumRequested", "premiumApproved")


class ProfileCreateRequest(BaseModel):
    """Payload for publishing a biodata. Unknown descriptive fields are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    biodata_type: BiodataType = Field(alias="biodataType")
    name: Optional[str] = Field(default=None, max_length=120)
    age: Optional[Union[int, str]] = None
    contact_email: Optional[str] = Field(default=None, alias="contactEmail")
    mobile_number: Optional[str] = Field(default=None, alias="mobileNumber")


class ProfilePatch(BaseModel):
    """Descriptive fields an owner may edit after publishing."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    biodata_type: Optional[BiodataType] = Field(default=None, alias="biodataType")
    name: Optional[str] = Field(default=None, max_length=120)
    age: Optional[Union[int, str]] = None
    mobile_number: Optional[str] = Field(default=None, alias="mobileNumber")


class ProfileDocument(BaseModel):
    """Biodata document stored in the ``profile`` collection."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    biodata_id: Optional[int] = Field(default=None, alias="biodataId")
    contact_email: Optional[str] = Field(default=None, alias="contactEmail")
    biodata_type: Optional[str] = Field(default=None, alias="biodataType")
    name: Optional[str] = None
    age: Optional[Union[int, str]] = None
    mobile_number: Optional[str] = Field(default=None, alias="mobileNumber")
    premium_requested: bool = Field(default=False, alias="premiumRequested")
    premium_approved: bool = Field(default=False, alias="premiumApproved")

    @property
    def premium_state(self) -> PremiumState:
        return premium_state_of(self.premium_requested, self.premium_approved)


def premium_state_of(requested: Any, approved: Any) -> PremiumState:
    if approved is True:
        return PremiumState.APPROVED
    if requested is True:
        return PremiumState.REQUESTED
    return PremiumState.NOT_REQUESTED


class ProfileCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    message: str
    inserted_id: PyObjectId = Field(alias="insertedId")
    biodata_id: int = Field(alias="biodataId")


class PremiumRequestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    profile_id: PyObjectId = Field(alias="profileId")
    premium_requested: bool = Field(alias="premiumRequested")
    state: PremiumState
    modified: bool = False


class PremiumApprovalResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    message: str
    user_id: PyObjectId = Field(alias="userId")
    biodata_id: Optional[int] = Field(default=None, alias="biodataId")
    state: PremiumState = PremiumState.APPROVED


class PremiumRequestItem(BaseModel):
    """Profile awaiting/holding premium, joined to its owning user."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    user_id: Optional[PyObjectId] = Field(default=None, alias="_id")
    profile_id: PyObjectId = Field(alias="profileId")
    biodata_id: Optional[int] = Field(default=None, alias="biodataId")
    name: Optional[str] = None
    email: Optional[str] = None
    premium_approved: bool = Field(default=False, alias="premiumApproved")


__all__ = [
    "BiodataType",
    "PROTECTED_PROFILE_FIELDS",
    "PremiumApprovalResponse",
    "PremiumRequestItem",
    "PremiumRequestResponse",
    "PremiumState",
    "ProfileCreateRequest",
    "ProfileCreatedResponse",
    "ProfileDocument",
    "ProfilePatch",
    "premium_state_of",
]
