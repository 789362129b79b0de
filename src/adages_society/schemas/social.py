"""Friendship, collection, saved-adage and notification schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .adage import AdageResponse
from .common import UserSummary


class FriendRequest(BaseModel):
    friend_id: int


class FriendAction(BaseModel):
    action: Literal["accept", "reject", "block", "unblock"]


class FriendshipResponse(BaseModel):
    id: int
    user_id: int
    friend_id: int
    status: str
    created_at: datetime | None = None
    other_user: UserSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class FriendList(BaseModel):
    outgoing: list[FriendshipResponse] = Field(default_factory=list)
    incoming: list[FriendshipResponse] = Field(default_factory=list)


class FriendshipStatus(BaseModel):
    status: Literal["none", "pending", "accepted", "blocked"]
    direction: Literal["none", "outgoing", "incoming"]


class SavedAdageCreate(BaseModel):
    adage_id: int


class SavedAdageResponse(BaseModel):
    id: int
    adage_id: int
    created_at: datetime | None = None
    adage: AdageResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class CollectionCreate(BaseModel):
    name: str
    description: str | None = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Collection name is required")
        return value


class CollectionUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    is_public: bool | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Collection name is required")
        return value


class CollectionItemCreate(BaseModel):
    adage_id: int
    notes: str | None = Field(None, max_length=2000)


class CollectionItemUpdate(BaseModel):
    notes: str | None = Field(None, max_length=2000)


class CollectionItemResponse(BaseModel):
    id: int
    collection_id: int
    adage_id: int
    notes: str | None = None
    created_at: datetime | None = None
    adage: AdageResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class CollectionResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: str | None = None
    is_public: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    adage_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class CollectionDetail(CollectionResponse):
    items: list[CollectionItemResponse] = Field(default_factory=list)


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    related_id: int | None = None
    related_type: str | None = None
    read: bool
    read_at: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class NotificationCounts(BaseModel):
    unread: int
    total: int
