"""
Listing search endpoint.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.listings import to_page
from marketplace.core.database import get_db
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.listing import ListingPage
from marketplace.services import listing_service
from marketplace.services.listing_service import DEFAULT_PAGE_SIZE, SearchFilters

router = APIRouter(prefix="/api", tags=["Search"])


@router.get(
    "/search",
    response_model=ListingPage,
    responses={400: {"model": ErrorResponse, "description": "Invalid filter"}},
    summary="Search listings",
    description="Full-text-ish search over active listings with optional filters.",
)
async def search(
    db: Annotated[Session, Depends(get_db)],
    q: Annotated[str, Query(description="Case-insensitive text in title or description")] = "",
    category_id: Annotated[Optional[str], Query(alias="categoryId")] = None,
    listing_type: Annotated[Optional[str], Query(alias="listingType", description="item or service")] = None,
    min_price: Annotated[Optional[float], Query(alias="minPrice")] = None,
    max_price: Annotated[Optional[float], Query(alias="maxPrice")] = None,
    location: Annotated[Optional[str], Query(description="Case-insensitive location substring")] = None,
    limit: Annotated[int, Query()] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query()] = 0,
) -> ListingPage:
    """
    - **q**: text searched in title and description
    - **categoryId**, **listingType**: exact filters
    - **minPrice**, **maxPrice**: inclusive price range
    - **location**: substring of the listing location
    """
    filters = SearchFilters(
        query=q,
        category_id=category_id,
        listing_type=listing_type,
        min_price=min_price,
        max_price=max_price,
        location=location,
    )
    return to_page(listing_service.search_listings(db, filters, limit, offset))
