"""
Category browsing endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.listings import to_page
from marketplace.core.database import get_db
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.listing import CategoriesResponse, CategoryListingPage, CategorySummary, CategoryWithCount
from marketplace.services import category_service
from marketplace.services.listing_service import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=CategoriesResponse, summary="All categories with active listing counts")
async def list_categories(db: Annotated[Session, Depends(get_db)]) -> CategoriesResponse:
    categories = [
        CategoryWithCount(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            listing_count=count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )
        for category, count in category_service.list_categories(db)
    ]
    return CategoriesResponse(categories=categories)


@router.get(
    "/{category_id}/listings",
    response_model=CategoryListingPage,
    responses={404: {"model": ErrorResponse, "description": "Category not found"}},
    summary="Active listings in one category",
)
async def list_category_listings(
    category_id: str,
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query()] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query()] = 0,
) -> CategoryListingPage:
    category, page = category_service.list_category_listings(db, category_id, limit, offset)
    return CategoryListingPage(
        category=CategorySummary.model_validate(category),
        **to_page(page).model_dump(),
    )
