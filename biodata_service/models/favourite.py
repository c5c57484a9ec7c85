from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .identifiers import PyObjectId


class FavouriteCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    biodata_unique_id: Union[int, str] = Field(alias="biodataUniqueId")
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    name: Optional[str] = None
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    occupation: Optional[str] = None


class FavouriteDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    user_email: str = Field(alias="userEmail")
    biodata_unique_id: Union[int, str] = Field(alias="biodataUniqueId")
    name: Optional[str] = None
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    occupation: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class FavouriteList(BaseModel):
    data: List[FavouriteDocument] = Field(default_factory=list)
    total: int = 0


class FavouriteCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    message: str = "Added to favourites"
    inserted_id: PyObjectId = Field(alias="insertedId")


__all__ = [
    "FavouriteCreate",
    "FavouriteCreatedResponse",
    "FavouriteDocument",
    "FavouriteList",
]
