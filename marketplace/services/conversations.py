"""
Inbox aggregation over a set of messages.

Everything here is pure: callers load messages from whatever store they
have and pass them in. A conversation is the set of messages exchanged
between the viewer and one counterpart, in either direction.

Messages are totally ordered by ``(created_at, id)``; the id breaks ties
between messages written in the same instant.
"""
import enum
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Tuple


class MessageLike(Protocol):
    id: str
    sender_id: str
    receiver_id: str
    listing_id: Optional[str]
    read: bool
    created_at: object


class Role(str, enum.Enum):
    SENT = "sent"
    RECEIVED = "received"


def role_of(message: MessageLike, viewer_id: str) -> Role:
    """Whether the viewer wrote or received the message."""
    if message.sender_id == viewer_id:
        return Role.SENT
    if message.receiver_id == viewer_id:
        return Role.RECEIVED
    raise ValueError(f"user {viewer_id} is not a participant of message {message.id}")


def counterpart_of(message: MessageLike, viewer_id: str) -> str:
    if role_of(message, viewer_id) is Role.SENT:
        return message.receiver_id
    return message.sender_id


def is_unread_for(message: MessageLike, viewer_id: str) -> bool:
    """Only received messages can be unread; the viewer's own never are."""
    return role_of(message, viewer_id) is Role.RECEIVED and not message.read


def order_key(message: MessageLike) -> Tuple:
    return (message.created_at, message.id)


@dataclass
class ConversationGroup:
    """Running tally for one counterpart."""

    other_user_id: str
    last_message: MessageLike
    unread_count: int = 0
    message_count: int = 0

    @property
    def listing_id(self) -> Optional[str]:
        """The listing the latest message is about, if any."""
        return self.last_message.listing_id

    def add(self, message: MessageLike, viewer_id: str) -> None:
        self.message_count += 1
        if order_key(message) > order_key(self.last_message):
            self.last_message = message
        if is_unread_for(message, viewer_id):
            self.unread_count += 1


def group_conversations(messages: Iterable[MessageLike], viewer_id: str) -> List[ConversationGroup]:
    """
    Fold the viewer's messages into one group per counterpart.

    Messages the viewer did not take part in are ignored. The result is
    ordered by each group's last message, most recent first.
    """
    groups: Dict[str, ConversationGroup] = {}
    for message in messages:
        if viewer_id not in (message.sender_id, message.receiver_id):
            continue
        other_user_id = counterpart_of(message, viewer_id)
        group = groups.get(other_user_id)
        if group is None:
            group = groups[other_user_id] = ConversationGroup(other_user_id=other_user_id, last_message=message)
        group.add(message, viewer_id)

    return sorted(groups.values(), key=lambda g: order_key(g.last_message), reverse=True)


def chronological(messages: Iterable[MessageLike]) -> List[MessageLike]:
    """Oldest first, the order a chat window displays."""
    return sorted(messages, key=order_key)


def unread_received(messages: Iterable[MessageLike], viewer_id: str) -> List[MessageLike]:
    """Messages a read receipt from the viewer would flip."""
    return [
        message for message in messages
        if viewer_id in (message.sender_id, message.receiver_id) and is_unread_for(message, viewer_id)
    ]
