from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .identifiers import PyObjectId

NOT_AVAILABLE = "N/A"
SNAPSHOT_FIELDS = ("name", "mobileNumber", "contactEmail")


class ContactRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


class ContactSnapshot(BaseModel):
    """Contact details of the target profile as they were when the request was paid for."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = NOT_AVAILABLE
    mobile_number: str = Field(default=NOT_AVAILABLE, alias="mobileNumber")
    contact_email: str = Field(default=NOT_AVAILABLE, alias="contactEmail")

    @classmethod
    def from_profile(cls, profile: dict[str, Any]) -> "ContactSnapshot":
        values = {}
        for field in SNAPSHOT_FIELDS:
            raw = profile.get(field)
            values[field] = str(raw) if raw not in (None, "") else NOT_AVAILABLE
        return cls(**values)


class ContactRequestCreate(BaseModel):
    """Body of ``POST /contact-requests``; ``biodataId`` is the profile's internal id."""

    model_config = ConfigDict(populate_by_name=True)

    user_email: Optional[str] = Field(default=None, alias="userEmail")
    profile_id: str = Field(alias="biodataId", min_length=1)
    transaction_id: str = Field(alias="transactionId", min_length=1)
    amount_paid: float = Field(default=0, alias="amountPaid", ge=0)


class ContactRequestDocument(BaseModel):
    """Document stored in the ``contactRequests`` collection."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    user_email: str = Field(alias="userEmail")
    biodata_id: int = Field(alias="biodataId")
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    amount_paid: float = Field(default=0, alias="amountPaid")
    status: ContactRequestStatus = ContactRequestStatus.PENDING
    requested_at: Optional[datetime] = Field(default=None, alias="requestedAt")
    snapshot: ContactSnapshot = Field(default_factory=ContactSnapshot)

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_snapshot(cls, data: Any) -> Any:
        # Older records kept the snapshot fields at the top level.
        if isinstance(data, dict) and "snapshot" not in data:
            flat = {field: data[field] for field in SNAPSHOT_FIELDS if field in data}
            if flat:
                data = {**data, "snapshot": flat}
        return data


class ContactRequestView(ContactRequestDocument):
    """A requester's view: the paid-for snapshot plus the profile's current details."""

    current: Optional[ContactSnapshot] = None


class ContactRequestCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    inserted_id: PyObjectId = Field(alias="insertedId")
    biodata_id: int = Field(alias="biodataId")
    status: ContactRequestStatus


class ContactRequestApprovedResponse(BaseModel):
    success: bool = True
    message: str = "Contact request approved"


class DeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deleted_count: int = Field(alias="deletedCount")


__all__ = [
    "ContactRequestApprovedResponse",
    "ContactRequestCreate",
    "ContactRequestCreatedResponse",
    "ContactRequestDocument",
    "ContactRequestStatus",
    "ContactRequestView",
    "ContactSnapshot",
    "DeleteResponse",
    "NOT_AVAILABLE",
]
