"""
Messaging: sending, the inbox and conversation read receipts.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from marketplace.core.errors import (
    Forbidden,
    InvalidConversation,
    ListingNotFound,
    MessageNotFound,
    UserNotFound,
    ValidationFailed,
)
from marketplace.core.logging import get_logger
from marketplace.models.listing import Listing
from marketplace.models.message import MAX_CONTENT_LENGTH
from marketplace.repositories.message_repository import MessageRepository
from marketplace.repositories.user_repository import UserRepository
from marketplace.schemas.message import ConversationSummary, LastMessage, MessageResponse
from marketplace.services.conversations import chronological, group_conversations, unread_received

logger = get_logger(__name__)


class MessageService:
    """Message operations bound to explicitly passed stores."""

    def __init__(self, messages: MessageRepository, users: UserRepository, db: Session) -> None:
        self.messages = messages
        self.users = users
        self._db = db

    @classmethod
    def for_session(cls, db: Session) -> "MessageService":
        return cls(MessageRepository(db), UserRepository(db), db)

    def send_message(
        self,
        sender_id: str,
        receiver_id: str,
        content: str,
        listing_id: Optional[str] = None,
    ) -> MessageResponse:
        """
        Store a new unread message.

        Content is trimmed first; the trimmed text must be non-empty and
        at most 5000 characters.
        """
        text = (content or "").strip()
        if not text:
            raise ValidationFailed("Message content cannot be empty", code="EMPTY_CONTENT")
        if len(text) > MAX_CONTENT_LENGTH:
            raise ValidationFailed(
                f"Message content cannot exceed {MAX_CONTENT_LENGTH} characters", code="CONTENT_TOO_LONG"
            )
        if sender_id == receiver_id:
            raise ValidationFailed("Cannot send message to yourself", code="INVALID_RECEIVER")
        if not self.users.exists(receiver_id):
            raise UserNotFound("The specified receiver does not exist", code="RECEIVER_NOT_FOUND")
        if listing_id and self._db.get(Listing, listing_id) is None:
            raise ListingNotFound()

        message = self.messages.add(sender_id, receiver_id, text, listing_id)
        self._db.commit()
        self._db.refresh(message)

        logger.info(
            "Message sent",
            extra={"extra_data": {"message_id": message.id, "sender_id": sender_id, "receiver_id": receiver_id}},
        )
        return MessageResponse.model_validate(message)

    def list_conversations(self, user_id: str) -> List[ConversationSummary]:
        """
        Inbox for ``user_id``: one summary per counterpart, most recent first.

        The user is not validated here; an unknown id simply has no
        messages.
        """
        groups = group_conversations(self.messages.involving(user_id), user_id)
        counterparts = self.users.get_many(group.other_user_id for group in groups)

        summaries = []
        for group in groups:
            other = counterparts.get(group.other_user_id)
            summaries.append(
                ConversationSummary(
                    other_user_id=group.other_user_id,
                    other_user_username=other.username if other else None,
                    other_user_profile_picture=other.profile_picture if other else None,
                    last_message=LastMessage.model_validate(group.last_message),
                    unread_count=group.unread_count,
                    listing_id=group.listing_id,
                )
            )

        logger.debug(
            "Listed conversations",
            extra={"extra_data": {"user_id": user_id, "conversations": len(summaries)}},
        )
        return summaries

    def get_conversation_messages(self, user_id: str, other_user_id: str) -> List[MessageResponse]:
        """
        Full conversation between two users, oldest first.

        Every message the requester received and had not read is marked
        read before the response is built, so the returned flags are the
        persisted ones. A second call changes nothing.

        Raises:
            InvalidConversation: both ids are the same user
            UserNotFound: the counterpart does not exist
        """
        if user_id == other_user_id:
            raise InvalidConversation()
        if not self.users.exists(other_user_id):
            raise UserNotFound()

        messages = chronological(self.messages.between(user_id, other_user_id))
        to_mark = unread_received(messages, user_id)
        if to_mark:
            marked = self.messages.mark_read(message.id for message in to_mark)
            self._db.commit()
            logger.info(
                "Marked conversation messages as read",
                extra={"extra_data": {"user_id": user_id, "other_user_id": other_user_id, "marked": marked}},
            )

        # Commit expired the instances, so this reloads persisted state
        return [MessageResponse.model_validate(message) for message in messages]

    def mark_message_read(self, user_id: str, message_id: str) -> MessageResponse:
        """Explicit read receipt for a single message; only its receiver may do this."""
        message = self.messages.get(message_id)
        if message is None:
            raise MessageNotFound()
        if message.receiver_id != user_id:
            raise Forbidden("Only the receiver can mark a message as read")

        if not message.read:
            self.messages.mark_read([message.id])
            self._db.commit()
            self._db.refresh(message)
        return MessageResponse.model_validate(message)

    def unread_count(self, user_id: str) -> int:
        return self.messages.count_unread(user_id)
