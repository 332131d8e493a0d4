"""
Messaging endpoints: inbox, conversation view and sending.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_user
from marketplace.core.database import get_db
from marketplace.core.security import TokenPayload
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.message import (
    ConversationMessagesResponse,
    ConversationsResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    UnreadCountResponse,
)
from marketplace.services.message_service import MessageService

router = APIRouter(prefix="/api/messages", tags=["Messages"])


def get_message_service(db: Annotated[Session, Depends(get_db)]) -> MessageService:
    return MessageService.for_session(db)


Service = Annotated[MessageService, Depends(get_message_service)]
CurrentUser = Annotated[TokenPayload, Depends(get_current_user)]


@router.get(
    "",
    response_model=ConversationsResponse,
    summary="Inbox",
    description="One entry per conversation partner, most recent conversation first.",
)
async def list_conversations(user: CurrentUser, service: Service) -> ConversationsResponse:
    return ConversationsResponse(conversations=service.list_conversations(user.user_id))


@router.post(
    "",
    response_model=SendMessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Empty, too long or self-addressed message"},
        404: {"model": ErrorResponse, "description": "Receiver or listing not found"},
    },
    summary="Send a message",
)
async def send_message(body: SendMessageRequest, user: CurrentUser, service: Service) -> SendMessageResponse:
    message = service.send_message(
        sender_id=user.user_id,
        receiver_id=body.receiver_id,
        content=body.content,
        listing_id=body.listing_id,
    )
    return SendMessageResponse(message=message)


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Total unread messages for the caller",
)
async def unread_count(user: CurrentUser, service: Service) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=service.unread_count(user.user_id))


@router.get(
    "/{other_user_id}",
    response_model=ConversationMessagesResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Conversation with yourself"},
        404: {"model": ErrorResponse, "description": "Other user not found"},
    },
    summary="Conversation with one user",
    description="Messages oldest first. Unread messages addressed to the caller are marked read.",
)
async def get_conversation(other_user_id: str, user: CurrentUser, service: Service) -> ConversationMessagesResponse:
    return ConversationMessagesResponse(messages=service.get_conversation_messages(user.user_id, other_user_id))


@router.patch(
    "/{message_id}/read",
    response_model=SendMessageResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Caller is not the receiver"},
        404: {"model": ErrorResponse, "description": "Message not found"},
    },
    summary="Mark one message as read",
)
async def mark_read(message_id: str, user: CurrentUser, service: Service) -> SendMessageResponse:
    return SendMessageResponse(message=service.mark_message_read(user.user_id, message_id))
