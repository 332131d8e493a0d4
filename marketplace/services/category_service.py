"""
Category browsing and the default category set.
"""
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from marketplace.core.errors import CategoryNotFound
from marketplace.core.logging import get_logger
from marketplace.models.category import Category
from marketplace.models.listing import Listing, ListingStatus
from marketplace.services.listing_service import DEFAULT_PAGE_SIZE, Page, paginate, listings_query

logger = get_logger(__name__)

DEFAULT_CATEGORIES = [
    ("Electronics", "electronics", "Phones, computers, cameras and other electronic devices"),
    ("Furniture", "furniture", "Tables, chairs, sofas, beds and home furniture"),
    ("Clothing & Accessories", "clothing-accessories", "Clothes, shoes, bags and accessories"),
    ("Home & Garden", "home-garden", "Home decor, kitchenware, tools and garden supplies"),
    ("Sports & Outdoors", "sports-outdoors", "Sports equipment, bikes and outdoor gear"),
    ("Books & Media", "books-media", "Books, movies, music and games"),
    ("Toys & Games", "toys-games", "Toys, board games and puzzles"),
    ("Vehicles", "vehicles", "Cars, motorcycles and vehicle parts"),
    ("Professional Services", "professional-services", "Consulting, accounting, legal and business services"),
    ("Home Services", "home-services", "Cleaning, repairs, plumbing and handyman work"),
    ("Creative Services", "creative-services", "Design, photography, writing and music"),
    ("Tutoring & Lessons", "tutoring-lessons", "Academic tutoring, music and language lessons"),
    ("Health & Wellness", "health-wellness", "Fitness training, coaching and wellness services"),
    ("Pet Services", "pet-services", "Pet sitting, dog walking, grooming and training"),
]


def seed_categories(db: Session) -> int:
    """Insert any default category that is missing. Returns how many were added."""
    existing = {slug for (slug,) in db.query(Category.slug).all()}
    added = 0
    for name, slug, description in DEFAULT_CATEGORIES:
        if slug in existing:
            continue
        db.add(Category(name=name, slug=slug, description=description))
        added += 1
    if added:
        db.commit()
        logger.info("Seeded categories", extra={"extra_data": {"added": added}})
    return added


def list_categories(db: Session) -> List[Tuple[Category, int]]:
    """All categories by name, each with its number of active listings."""
    counts = dict(
        db.query(Listing.category_id, func.count(Listing.id))
        .filter(Listing.status == ListingStatus.ACTIVE.value)
        .group_by(Listing.category_id)
        .all()
    )
    categories = db.query(Category).order_by(Category.name.asc()).all()
    return [(category, counts.get(category.id, 0)) for category in categories]


def list_category_listings(db: Session, category_id: str, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0):
    category = db.get(Category, category_id)
    if category is None:
        raise CategoryNotFound()
    query = listings_query(db).filter(
        Listing.category_id == category_id,
        Listing.status == ListingStatus.ACTIVE.value,
    )
    page: Page = paginate(query, limit, offset)
    return category, page
