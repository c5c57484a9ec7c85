"""Common identifier types shared across models."""

from __future__ import annotations

from typing import Annotated, Any

from bson import ObjectId
from bson.errors import InvalidId
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator


def parse_object_id(value: Any) -> ObjectId:
    """Coerce a path/body identifier into an ObjectId, raising ValueError when malformed."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("ObjectId string must not be empty")
        try:
            return ObjectId(text)
        except (InvalidId, TypeError) as exc:
            raise ValueError(f"invalid id: {text!r}") from exc
    raise TypeError("ObjectId value must be str or ObjectId instance")


PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(parse_object_id),
    PlainSerializer(lambda value: str(value), return_type=str),
]

__all__ = ["PyObjectId", "parse_object_id"]
