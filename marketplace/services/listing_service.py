"""
Listing lifecycle, browsing and search.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, joinedload

from marketplace.core.errors import CategoryNotFound, Forbidden, ListingNotFound, UserNotFound, ValidationFailed
from marketplace.core.logging import get_logger
from marketplace.models.category import Category
from marketplace.models.listing import Listing, ListingStatus, ListingType
from marketplace.models.user import User
from marketplace.schemas.listing import MAX_IMAGES

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class Page:
    listings: List[Listing]
    total_count: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count


@dataclass
class SearchFilters:
    query: str = ""
    category_id: Optional[str] = None
    listing_type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    location: Optional[str] = None


def clamp_page(limit: int, offset: int):
    return min(max(limit, 1), MAX_PAGE_SIZE), max(offset, 0)


def _value(v):
    return v.value if hasattr(v, "value") else v


def _check_rules(listing_type: str, pricing_type: Optional[str], price: Optional[float], images: Optional[List[str]]) -> None:
    """Rules shared by create and update, applied to the resulting listing."""
    if listing_type == ListingType.SERVICE.value and not pricing_type:
        raise ValidationFailed("Pricing type is required for service listings")
    if listing_type == ListingType.ITEM.value and pricing_type:
        raise ValidationFailed("Pricing type should not be set for item listings")
    if price is not None and price <= 0:
        raise ValidationFailed("Price must be greater than 0", code="INVALID_PRICE")
    if images is not None:
        if len(images) == 0:
            raise ValidationFailed("At least one image is required", code="INVALID_IMAGES")
        if len(images) > MAX_IMAGES:
            raise ValidationFailed(f"Maximum {MAX_IMAGES} images allowed per listing", code="INVALID_IMAGES")


def contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally anywhere; use with ``escape="\\"``."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def listings_query(db: Session) -> Query:
    return db.query(Listing).options(joinedload(Listing.seller), joinedload(Listing.category))


def paginate(query: Query, limit: int, offset: int) -> Page:
    limit, offset = clamp_page(limit, offset)
    total = query.order_by(None).count()
    listings = query.order_by(Listing.created_at.desc(), Listing.id.asc()).offset(offset).limit(limit).all()
    return Page(listings=listings, total_count=total, limit=limit, offset=offset)


def _owned_listing(db: Session, listing_id: str, user_id: str, action: str) -> Listing:
    listing = db.get(Listing, listing_id)
    if listing is None:
        raise ListingNotFound()
    if listing.seller_id != user_id:
        raise Forbidden(f"You can only {action} your own listings")
    return listing


def create_listing(db: Session, seller_id: str, data: Dict[str, Any]) -> Listing:
    listing_type = _value(data["listing_type"])
    pricing_type = _value(data.get("pricing_type"))
    _check_rules(listing_type, pricing_type, data["price"], data["images"])

    if db.get(Category, data["category_id"]) is None:
        raise CategoryNotFound("Invalid category ID")
    if db.get(User, seller_id) is None:
        raise UserNotFound("Invalid seller ID", code="SELLER_NOT_FOUND")

    listing = Listing(
        seller_id=seller_id,
        category_id=data["category_id"],
        title=data["title"],
        description=data["description"],
        price=data["price"],
        listing_type=listing_type,
        pricing_type=pricing_type,
        images=list(data["images"]),
        location=data["location"],
        status=ListingStatus.ACTIVE.value,
    )
    db.add(listing)
    db.commit()
    logger.info("Listing created", extra={"extra_data": {"listing_id": listing.id, "seller_id": seller_id}})
    return get_listing(db, listing.id)


def get_listing(db: Session, listing_id: str) -> Listing:
    listing = listings_query(db).filter(Listing.id == listing_id).first()
    if listing is None:
        raise ListingNotFound()
    return listing


def list_listings(db: Session, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> Page:
    """Active listings, newest first."""
    query = listings_query(db).filter(Listing.status == ListingStatus.ACTIVE.value)
    return paginate(query, limit, offset)


def update_listing(db: Session, listing_id: str, user_id: str, changes: Dict[str, Any]) -> Listing:
    """Apply a partial update; only keys present in ``changes`` are touched."""
    listing = _owned_listing(db, listing_id, user_id, "update")
    changes = {key: _value(value) for key, value in changes.items()}

    listing_type = changes.get("listing_type") or listing.listing_type
    if "pricing_type" in changes:
        pricing_type = changes["pricing_type"]
    elif listing_type == ListingType.ITEM.value:
        # Switching a service to an item drops its pricing type
        pricing_type = None
        if listing.pricing_type is not None:
            changes["pricing_type"] = None
    else:
        pricing_type = listing.pricing_type
    _check_rules(listing_type, pricing_type, changes.get("price"), changes.get("images"))

    if changes.get("category_id") and db.get(Category, changes["category_id"]) is None:
        raise CategoryNotFound("Invalid category ID")

    for key, value in changes.items():
        if value is None and key not in ("pricing_type",):
            continue
        setattr(listing, key, value)
    db.commit()
    logger.info("Listing updated", extra={"extra_data": {"listing_id": listing_id, "fields": sorted(changes)}})
    return get_listing(db, listing_id)


def update_listing_status(db: Session, listing_id: str, user_id: str, status: str) -> Listing:
    valid = [s.value for s in ListingStatus]
    if status not in valid:
        raise ValidationFailed(f"Invalid status. Must be one of: {', '.join(valid)}", code="INVALID_STATUS")
    listing = _owned_listing(db, listing_id, user_id, "update")
    listing.status = status
    db.commit()
    logger.info("Listing status changed", extra={"extra_data": {"listing_id": listing_id, "status": status}})
    return get_listing(db, listing_id)


def delete_listing(db: Session, listing_id: str, user_id: str) -> None:
    listing = _owned_listing(db, listing_id, user_id, "delete")
    db.delete(listing)
    db.commit()
    logger.info("Listing deleted", extra={"extra_data": {"listing_id": listing_id}})


def search_listings(db: Session, filters: SearchFilters, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> Page:
    """
    Search active listings.

    ``query`` and ``location`` are case-insensitive substring matches; the
    price bounds are inclusive. Every filter is optional.
    """
    if filters.listing_type and filters.listing_type not in [t.value for t in ListingType]:
        raise ValidationFailed('Listing type must be either "item" or "service"', code="INVALID_LISTING_TYPE")
    if filters.min_price is not None and filters.min_price < 0:
        raise ValidationFailed("Minimum price must be a non-negative number", code="INVALID_MIN_PRICE")
    if filters.max_price is not None and filters.max_price < 0:
        raise ValidationFailed("Maximum price must be a non-negative number", code="INVALID_MAX_PRICE")
    if filters.min_price is not None and filters.max_price is not None and filters.min_price > filters.max_price:
        raise ValidationFailed("Minimum price cannot be greater than maximum price", code="INVALID_PRICE_RANGE")

    query = listings_query(db).filter(Listing.status == ListingStatus.ACTIVE.value)
    text = (filters.query or "").strip().lower()
    if text:
        pattern = contains_pattern(text)
        query = query.filter(
            or_(
                func.lower(Listing.title).like(pattern, escape="\\"),
                func.lower(Listing.description).like(pattern, escape="\\"),
            )
        )
    if filters.category_id:
        query = query.filter(Listing.category_id == filters.category_id)
    if filters.listing_type:
        query = query.filter(Listing.listing_type == filters.listing_type)
    if filters.min_price is not None:
        query = query.filter(Listing.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.filter(Listing.price <= filters.max_price)
    if filters.location and filters.location.strip():
        location = contains_pattern(filters.location.strip().lower())
        query = query.filter(func.lower(Listing.location).like(location, escape="\\"))

    page = paginate(query, limit, offset)
    logger.debug(
        "Searched listings",
        extra={"extra_data": {"query": text, "total": page.total_count, "returned": len(page.listings)}},
    )
    return page
