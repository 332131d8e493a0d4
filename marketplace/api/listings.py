"""
Listing CRUD endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_user
from marketplace.core.database import get_db
from marketplace.core.security import TokenPayload
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.listing import (
    ListingCreateRequest,
    ListingDetail,
    ListingEnvelope,
    ListingPage,
    ListingStatusRequest,
    ListingUpdateRequest,
)
from marketplace.services import listing_service
from marketplace.services.listing_service import Page

router = APIRouter(prefix="/api/listings", tags=["Listings"])

DB = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[TokenPayload, Depends(get_current_user)]

OWNER_ERRORS = {
    403: {"model": ErrorResponse, "description": "Not the seller"},
    404: {"model": ErrorResponse, "description": "Listing not found"},
}


def to_page(page: Page) -> ListingPage:
    return ListingPage(
        listings=[ListingDetail.model_validate(listing) for listing in page.listings],
        total_count=page.total_count,
        limit=page.limit,
        offset=page.offset,
        has_more=page.has_more,
    )


@router.get("", response_model=ListingPage, summary="Browse active listings")
async def list_listings(
    db: DB,
    limit: Annotated[int, Query(description="Page size, clamped to 1-100")] = listing_service.DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(description="Number of listings to skip")] = 0,
) -> ListingPage:
    return to_page(listing_service.list_listings(db, limit, offset))


@router.post(
    "",
    response_model=ListingEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid listing"},
        404: {"model": ErrorResponse, "description": "Unknown category"},
    },
    summary="Create a listing",
)
async def create_listing(body: ListingCreateRequest, user: CurrentUser, db: DB) -> ListingEnvelope:
    listing = listing_service.create_listing(db, user.user_id, body.model_dump())
    return ListingEnvelope(listing=ListingDetail.model_validate(listing))


@router.get(
    "/{listing_id}",
    response_model=ListingEnvelope,
    responses={404: {"model": ErrorResponse, "description": "Listing not found"}},
    summary="Get one listing",
)
async def get_listing(listing_id: str, db: DB) -> ListingEnvelope:
    return ListingEnvelope(listing=ListingDetail.model_validate(listing_service.get_listing(db, listing_id)))


@router.put("/{listing_id}", response_model=ListingEnvelope, responses=OWNER_ERRORS, summary="Update a listing")
async def update_listing(listing_id: str, body: ListingUpdateRequest, user: CurrentUser, db: DB) -> ListingEnvelope:
    listing = listing_service.update_listing(db, listing_id, user.user_id, body.model_dump(exclude_unset=True))
    return ListingEnvelope(listing=ListingDetail.model_validate(listing))


@router.patch("/{listing_id}/status", response_model=ListingEnvelope, responses=OWNER_ERRORS, summary="Change listing status")
async def update_status(listing_id: str, body: ListingStatusRequest, user: CurrentUser, db: DB) -> ListingEnvelope:
    listing = listing_service.update_listing_status(db, listing_id, user.user_id, body.status)
    return ListingEnvelope(listing=ListingDetail.model_validate(listing))


@router.delete(
    "/{listing_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=OWNER_ERRORS,
    summary="Delete a listing",
)
async def delete_listing(listing_id: str, user: CurrentUser, db: DB) -> Response:
    listing_service.delete_listing(db, listing_id, user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
