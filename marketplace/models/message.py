"""
Message database model.
"""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text

from marketplace.core.database import Base, new_id, utcnow

MAX_CONTENT_LENGTH = 5000


class Message(Base):
    """
    One directed text message between two users.

    Immutable once written except for ``read``, which only ever goes
    from False to True.
    """

    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=new_id)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    listing_id = Column(String(36), ForeignKey("listings.id", ondelete="SET NULL"), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("sender_id <> receiver_id", name="ck_messages_not_self"),
        Index("ix_messages_receiver_read", "receiver_id", "read"),
        Index("ix_messages_created_at_id", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})>"

