"""
Schemas for messaging and the inbox.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from marketplace.schemas.common import APIModel


class SendMessageRequest(APIModel):
    """Request schema for POST /api/messages."""

    receiver_id: str = Field(..., min_length=1)
    content: str
    listing_id: Optional[str] = None

    @field_validator("listing_id", mode="before")
    @classmethod
    def blank_listing_is_none(cls, v):
        return v or None


class MessageResponse(APIModel):
    """Full projection of a single message."""

    id: str
    sender_id: str
    receiver_id: str
    content: str
    listing_id: Optional[str] = None
    read: bool
    created_at: datetime


class LastMessage(APIModel):
    id: str
    content: str
    created_at: datetime
    sender_id: str
    receiver_id: str
    listing_id: Optional[str] = None
    read: bool


class ConversationSummary(APIModel):
    """One inbox row: the latest message exchanged with one counterpart."""

    other_user_id: str
    other_user_username: Optional[str] = None
    other_user_profile_picture: Optional[str] = None
    last_message: LastMessage
    unread_count: int
    listing_id: Optional[str] = None


class SendMessageResponse(APIModel):
    message: MessageResponse


class ConversationsResponse(APIModel):
    conversations: List[ConversationSummary]


class ConversationMessagesResponse(APIModel):
    messages: List[MessageResponse]


class UnreadCountResponse(APIModel):
    unread_count: int
