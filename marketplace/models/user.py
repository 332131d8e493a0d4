"""
User database model.
"""
from sqlalchemy import Boolean, Column, DateTime, Float, String
from sqlalchemy.orm import relationship

from marketplace.core.database import Base, new_id, utcnow


class User(Base):
    """A registered marketplace member."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(20), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)

    location = Column(String(100), nullable=True)
    profile_picture = Column(String(500), nullable=True)
    average_rating = Column(Float, nullable=False, default=0.0)
    join_date = Column(DateTime, nullable=False, default=utcnow)

    # Email verification and password reset are single-use tokens
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String(64), nullable=True, unique=True)
    email_verification_expires = Column(DateTime, nullable=True)
    password_reset_token = Column(String(64), nullable=True, unique=True)
    password_reset_expires = Column(DateTime, nullable=True)

    listings = relationship("Listing", back_populates="seller", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
