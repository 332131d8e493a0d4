"""
Listing, category and search schemas.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from marketplace.models.listing import ListingStatus, ListingType, PricingType
from marketplace.schemas.common import APIModel

MAX_IMAGES = 10


class ListingCreateRequest(APIModel):
    """Request schema for POST /api/listings."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    price: float
    listing_type: ListingType
    pricing_type: Optional[PricingType] = None
    category_id: str = Field(..., min_length=1)
    images: List[str]
    location: str = Field(..., min_length=1, max_length=100)


class ListingUpdateRequest(APIModel):
    """Request schema for PUT /api/listings/{id}; every field optional."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    price: Optional[float] = None
    listing_type: Optional[ListingType] = None
    pricing_type: Optional[PricingType] = None
    category_id: Optional[str] = None
    images: Optional[List[str]] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=100)
    status: Optional[ListingStatus] = None


class ListingStatusRequest(APIModel):
    status: str


class SellerSummary(APIModel):
    id: str
    username: str
    profile_picture: Optional[str] = None
    average_rating: float
    join_date: datetime


class CategorySummary(APIModel):
    id: str
    name: str
    slug: str


class ListingResponse(APIModel):
    id: str
    seller_id: str
    category_id: str
    title: str
    description: str
    price: float
    listing_type: str
    pricing_type: Optional[str] = None
    images: List[str]
    location: str
    status: str
    created_at: datetime
    updated_at: datetime


class ListingDetail(ListingResponse):
    seller: SellerSummary
    category: CategorySummary


class ListingEnvelope(APIModel):
    listing: ListingDetail


class ListingPage(APIModel):
    listings: List[ListingDetail]
    total_count: int
    limit: int
    offset: int
    has_more: bool


class CategoryWithCount(APIModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    listing_count: int
    created_at: datetime
    updated_at: datetime


class CategoriesResponse(APIModel):
    categories: List[CategoryWithCount]


class CategoryListingPage(ListingPage):
    category: CategorySummary
