from typing import Iterable, List, Optional

from sqlalchemy import and_, func, or_, update
from sqlalchemy.orm import Session

from marketplace.models.message import Message


class MessageRepository:
    """Message store: predicate queries, ordering and batch read receipts."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def add(self, sender_id: str, receiver_id: str, content: str, listing_id: Optional[str] = None) -> Message:
        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            listing_id=listing_id,
            read=False,
        )
        self._db.add(message)
        self._db.flush()
        return message

    def get(self, message_id: str) -> Optional[Message]:
        return self._db.get(Message, message_id)

    def involving(self, user_id: str) -> List[Message]:
        """Every message the user sent or received, newest first."""
        return (
            self._db.query(Message)
            .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .all()
        )

    def between(self, user_id: str, other_user_id: str) -> List[Message]:
        """Both directions of one conversation, oldest first."""
        return (
            self._db.query(Message)
            .filter(
                or_(
                    and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
                    and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
                )
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )

    def mark_read(self, message_ids: Iterable[str]) -> int:
        ids = list(message_ids)
        if not ids:
            return 0
        result = self._db.execute(
            update(Message)
            .where(Message.id.in_(ids), Message.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def count_unread(self, receiver_id: str) -> int:
        return (
            self._db.query(func.count(Message.id))
            .filter(Message.receiver_id == receiver_id, Message.read.is_(False))
            .scalar()
            or 0
        )
