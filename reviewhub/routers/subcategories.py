"""
Subcategories Router

Endpoints:
- GET /subcategories?category_id= - List subcategories, optionally of one category
- POST /subcategories - Create a subcategory (authenticated)
- PUT /subcategories/{subcategory_id}/move - Move to another category (authenticated)
- DELETE /subcategories/{subcategory_id} - Delete with its companies (authenticated)
- GET /subcategories/{category_slug}/{subcategory_slug} - Companies of a subcategory
"""

import logging

from fastapi import APIRouter, Query, Request, status

from reviewhub.config import get_settings
from reviewhub.dependencies import ActiveUser, DbSession
from reviewhub.schemas.category import (
    SubcategoryCreate,
    SubcategoryMove,
    SubcategoryResponse,
    SubcategoryWithCategory,
)
from reviewhub.schemas.common import MessageResponse
from reviewhub.schemas.company import CompanyResponse
from reviewhub.services import catalog
from reviewhub.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/subcategories",
    tags=["Subcategories"],
    responses={
        404: {"description": "Subcategory or category not found"},
    },
)


@router.get(
    "",
    response_model=list[SubcategoryWithCategory],
    summary="List subcategories",
)
@limiter.limit(settings.rate_limit_default)
def list_subcategories(
    request: Request,
    db: DbSession,
    category_id: int | None = Query(default=None, ge=1, description="Filter by category"),
) -> list[SubcategoryWithCategory]:
    return [
        SubcategoryWithCategory.model_validate(subcategory)
        for subcategory in catalog.list_subcategories(db, category_id)
    ]


@router.post(
    "",
    response_model=SubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a subcategory",
)
@limiter.limit(settings.rate_limit_write)
def create_subcategory(
    request: Request,
    subcategory_data: SubcategoryCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> SubcategoryResponse:
    subcategory = catalog.create_subcategory(db, subcategory_data)
    return SubcategoryResponse.model_validate(subcategory)


@router.put(
    "/{subcategory_id}/move",
    response_model=SubcategoryResponse,
    summary="Move a subcategory",
    description="Attach the subcategory to another category. Its companies keep their own category.",
)
@limiter.limit(settings.rate_limit_write)
def move_subcategory(
    request: Request,
    subcategory_id: int,
    move: SubcategoryMove,
    db: DbSession,
    current_user: ActiveUser,
) -> SubcategoryResponse:
    subcategory = catalog.move_subcategory(db, subcategory_id, move.new_category_id)
    return SubcategoryResponse.model_validate(subcategory)


@router.delete(
    "/{subcategory_id}",
    response_model=MessageResponse,
    summary="Delete a subcategory",
    description="Delete a subcategory and its companies. Their reviews are kept but no longer shown.",
)
@limiter.limit(settings.rate_limit_write)
def delete_subcategory(
    request: Request,
    subcategory_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    catalog.delete_subcategory(db, subcategory_id)
    return MessageResponse(message="Subcategory and related companies deleted successfully")


@router.get(
    "/{category_slug}/{subcategory_slug}",
    response_model=list[CompanyResponse],
    summary="Companies of a subcategory",
)
@limiter.limit(settings.rate_limit_default)
def list_subcategory_companies(
    request: Request,
    category_slug: str,
    subcategory_slug: str,
    db: DbSession,
) -> list[CompanyResponse]:
    companies = catalog.companies_in_subcategory(db, category_slug, subcategory_slug)
    return [CompanyResponse.model_validate(company) for company in companies]
