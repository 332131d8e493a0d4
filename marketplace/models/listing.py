"""
Listing database model.
"""
import enum

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from marketplace.core.database import Base, new_id, utcnow


class ListingType(str, enum.Enum):
    ITEM = "item"
    SERVICE = "service"


class PricingType(str, enum.Enum):
    FIXED = "fixed"
    HOURLY = "hourly"


class ListingStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    COMPLETED = "completed"
    DELETED = "deleted"


class Listing(Base):
    """An item or service offered by a seller."""

    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=new_id)
    seller_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    listing_type = Column(String(20), nullable=False)
    # Only set for services
    pricing_type = Column(String(20), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    location = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default=ListingStatus.ACTIVE.value, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    seller = relationship("User", back_populates="listings")
    category = relationship("Category")

    __table_args__ = (
        Index("ix_listings_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title!r})>"
