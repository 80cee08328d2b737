"""
Categories Router

Endpoints:
- GET /categories - All categories with nested subcategories
- POST /categories - Create a category (authenticated)
- DELETE /categories/{category_id} - Cascade delete (authenticated)
- GET /categories/{slug}/companies - Plain list of a category's companies
- GET /categories/{slug}/companies-paginated - Searchable, sortable listing
  with rating stats
"""

import logging

from fastapi import APIRouter, Query, Request, status

from reviewhub.config import get_settings
from reviewhub.dependencies import ActiveUser, CategoryPagination, DbSession
from reviewhub.schemas.category import (
    CategoryCreate,
    CategoryMinimal,
    CategoryResponse,
    CategoryWithSubcategories,
)
from reviewhub.schemas.common import MessageResponse, PageInfoResponse
from reviewhub.schemas.company import CompanyResponse, CompanyWithStats
from reviewhub.schemas.feed import CategoryCompaniesResponse
from reviewhub.services import catalog
from reviewhub.services.feeds import CompanyWithStats as CompanyStatsEntry
from reviewhub.services.feeds import companies_in_category
from reviewhub.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    responses={
        404: {"description": "Category not found"},
    },
)


def company_with_stats(entry: CompanyStatsEntry) -> CompanyWithStats:
    """Flatten a feed entry into the listing response shape."""
    return CompanyWithStats(
        **CompanyResponse.model_validate(entry.company).model_dump(),
        avg_rating=entry.avg_rating,
        review_count=entry.review_count,
    )


@router.get(
    "",
    response_model=list[CategoryWithSubcategories],
    summary="List categories",
    description="All categories ordered by name, each with its subcategories.",
)
@limiter.limit(settings.rate_limit_default)
def list_categories(
    request: Request,
    db: DbSession,
) -> list[CategoryWithSubcategories]:
    return [
        CategoryWithSubcategories.model_validate(category)
        for category in catalog.list_categories(db)
    ]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
@limiter.limit(settings.rate_limit_write)
def create_category(
    request: Request,
    category_data: CategoryCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> CategoryResponse:
    """
    Create a category. The slug is derived from the name.

    Raises:
        ConflictError: 409 if the name is already used
    """
    category = catalog.create_category(db, category_data)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Delete a category",
    description=(
        "Delete a category, its subcategories and all their companies. "
        "Reviews of those companies are kept but no longer shown."
    ),
)
@limiter.limit(settings.rate_limit_write)
def delete_category(
    request: Request,
    category_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    catalog.delete_category(db, category_id)
    return MessageResponse(
        message="Category, its subcategories, and all related companies deleted successfully"
    )


@router.get(
    "/{slug}/companies-paginated",
    response_model=CategoryCompaniesResponse,
    summary="Paginated companies of a category",
    description="""
    Companies of a category with their average rating and review count.

    - **search**: case-insensitive substring of the company name
    - **sort**: `name` (A-Z) or `rating` (best first, then most reviewed)

    Companies without reviews are included with a 0 rating.
    """,
)
@limiter.limit(settings.rate_limit_default)
def list_category_companies_paginated(
    request: Request,
    slug: str,
    db: DbSession,
    pagination: CategoryPagination,
    search: str | None = Query(default=None, max_length=100, description="Name filter"),
    sort: str = Query(default="name", description="\"rating\" or \"name\""),
) -> CategoryCompaniesResponse:
    page = companies_in_category(
        db,
        slug,
        page=pagination.page,
        limit=pagination.limit,
        search=search,
        sort=sort,
    )
    return CategoryCompaniesResponse(
        companies=[company_with_stats(entry) for entry in page.companies],
        pagination=PageInfoResponse.model_validate(page.pagination),
        category=CategoryMinimal.model_validate(page.category),
    )


@router.get(
    "/{slug}/companies",
    response_model=list[CompanyResponse],
    summary="Companies of a category",
)
@limiter.limit(settings.rate_limit_default)
def list_category_companies(
    request: Request,
    slug: str,
    db: DbSession,
) -> list[CompanyResponse]:
    category = catalog.get_category_by_slug(db, slug)
    return [
        CompanyResponse.model_validate(company)
        for company in catalog.list_companies(db, category_id=category.id)
    ]
