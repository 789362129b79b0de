"""Schemas for citations, events, documents, contact messages and the mailing list."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import EmailStr


class CitationCreate(BaseModel):
    adage_id: int
    source_text: str = Field(..., min_length=1)
    source_url: str | None = None
    source_type: str = "other"


class CitationUpdate(BaseModel):
    verified: bool | None = None
    source_text: str | None = Field(None, min_length=1)
    source_url: str | None = None
    source_type: str | None = None


class CitationResponse(BaseModel):
    id: int
    adage_id: int
    source_text: str
    source_url: str | None = None
    source_type: str
    submitted_by: int | None = None
    verified: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str | None = None
    event_date: datetime
    location: str | None = None
    event_type: str = "other"


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = None
    event_date: datetime | None = None
    location: str | None = None
    event_type: str | None = None
    hidden: bool | None = None


class EventResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    event_date: datetime
    location: str | None = None
    event_type: str
    created_by: int | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    file_url: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    category: str = "general"
    published: bool = True
    order_index: int = 0


class DocumentUpdate(BaseModel):
    title: str | None = Field(None, min_length=1)
    description: str | None = None
    file_url: str | None = Field(None, min_length=1)
    file_name: str | None = Field(None, min_length=1)
    category: str | None = None
    published: bool | None = None
    order_index: int | None = None
    hidden: bool | None = None


class DocumentResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    file_url: str
    file_name: str
    category: str
    published: bool
    order_index: int
    created_at: datetime | None = None
    hidden_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    subject: str | None = Field(None, max_length=300)
    message: str = Field(..., min_length=1, max_length=10000)
    category: Literal["general", "correction", "suggestion", "other"] = "general"
    subscribe: bool = False


class ContactUpdate(BaseModel):
    read: bool | None = None
    replied: bool | None = None


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str
    subject: str | None = None
    message: str
    category: str
    user_id: int | None = None
    challenge_id: int | None = None
    read: bool
    replied: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SubscribeRequest(BaseModel):
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    source: str = "website"


class UnsubscribeRequest(BaseModel):
    email: EmailStr


class MailingListResponse(BaseModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    source: str
    confirmed: bool
    subscribed_at: datetime | None = None
    unsubscribed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionStatus(BaseModel):
    subscribed: bool


class WeeklySendResult(BaseModel):
    sent: int
    errors: int
    recipients: int


class MessageReplyCreate(BaseModel):
    reply_text: str = Field(..., min_length=1, max_length=10000)


class MessageReplyResponse(BaseModel):
    id: int
    message_id: int
    replied_by: int | None = None
    reply_text: str
    created_at: datetime | None = None
    email_sent: bool = False

    model_config = ConfigDict(from_attributes=True)
