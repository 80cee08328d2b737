"""
Companies Router

Endpoints:
- GET /companies - List companies (filter by category_id / subcategory_id)
- POST /companies - Create a company (authenticated)
- GET /companies/best-by-category - Homepage ranking
- GET /companies/latest-best-reviews - Newest reviews rated 3+
- GET /companies/slug/{slug} - Company by slug
- GET /companies/slug/{slug}/with-ratings - Company with rating statistics
- GET /companies/category/{category_id} - Companies of a category
- GET /companies/category/slug/{slug} - Companies of a category, by slug
- GET /companies/subcategory/slug/{slug} - Companies of a subcategory, by slug
- GET /companies/subcategory/{subcategory_id} - Companies of a subcategory
- GET /companies/{company_id}/reviews/display - Curated review sample
- PUT /companies/{company_id} - Update a company (authenticated)
- DELETE /companies/{company_id} - Delete a company (authenticated)

Static paths are registered before /companies/{company_id} routes so that
e.g. /companies/best-by-category is not parsed as a company id.
"""

import logging

from fastapi import APIRouter, Query, Request, status

from reviewhub.config import get_settings
from reviewhub.dependencies import ActiveUser, DbSession, Rng
from reviewhub.schemas.common import MessageResponse
from reviewhub.schemas.company import (
    CompanyCreate,
    CompanyResponse,
    CompanyUpdate,
    CompanyWithRatingsResponse,
)
from reviewhub.schemas.feed import BestByCategoryResponse, CategoryRankingResponse
from reviewhub.schemas.review import ReviewResponse
from reviewhub.services import catalog
from reviewhub.services.feeds import latest_best_reviews
from reviewhub.services.ranking import best_companies_by_category
from reviewhub.services.rate_limiter import limiter
from reviewhub.services.ratings import get_company_stats
from reviewhub.services.sampler import select_display_reviews

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/companies",
    tags=["Companies"],
    responses={
        404: {"description": "Company not found"},
    },
)


# =============================================================================
# Listing & Creation
# =============================================================================


@router.get(
    "",
    response_model=list[CompanyResponse],
    summary="List companies",
)
@limiter.limit(settings.rate_limit_default)
def list_companies(
    request: Request,
    db: DbSession,
    category_id: int | None = Query(default=None, ge=1),
    subcategory_id: int | None = Query(default=None, ge=1),
) -> list[CompanyResponse]:
    companies = catalog.list_companies(db, category_id, subcategory_id)
    return [CompanyResponse.model_validate(company) for company in companies]


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company",
    description=(
        "Create a company. Without category and subcategory it is filed under "
        "General / General."
    ),
)
@limiter.limit(settings.rate_limit_write)
def create_company(
    request: Request,
    company_data: CompanyCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> CompanyResponse:
    company = catalog.create_company(db, company_data)
    return CompanyResponse.model_validate(company)


# =============================================================================
# Discovery Feeds
# =============================================================================


@router.get(
    "/best-by-category",
    response_model=BestByCategoryResponse,
    summary="Best companies by category",
    description="""
    Up to 6 randomly chosen categories, each with its top 4 companies by
    average rating (ties broken by review count) and their best review.

    The categories are drawn again on every request.
    """,
)
@limiter.limit(settings.rate_limit_default)
def get_best_companies_by_category(
    request: Request,
    db: DbSession,
    rng: Rng,
) -> BestByCategoryResponse:
    rankings = best_companies_by_category(
        db,
        category_count=settings.best_categories_count,
        per_category=settings.best_companies_per_category,
        rng=rng,
    )
    return BestByCategoryResponse(
        categories=[CategoryRankingResponse.model_validate(ranking) for ranking in rankings]
    )


@router.get(
    "/latest-best-reviews",
    response_model=list[ReviewResponse],
    summary="Latest good reviews",
    description="The newest reviews rated 3 stars or better.",
)
@limiter.limit(settings.rate_limit_default)
def get_latest_best_reviews(
    request: Request,
    db: DbSession,
) -> list[ReviewResponse]:
    reviews = latest_best_reviews(
        db,
        limit=settings.latest_reviews_limit,
        min_rating=settings.latest_reviews_min_rating,
    )
    return [ReviewResponse.model_validate(review) for review in reviews]


# =============================================================================
# Lookups
# =============================================================================


@router.get(
    "/slug/{slug}/with-ratings",
    response_model=CompanyWithRatingsResponse,
    summary="Company with ratings",
    description="Company page header: the company, its average, review count and star breakdown.",
)
@limiter.limit(settings.rate_limit_default)
def get_company_with_ratings(
    request: Request,
    slug: str,
    db: DbSession,
) -> CompanyWithRatingsResponse:
    company = catalog.get_company_by_slug(db, slug)
    stats = get_company_stats(db, company.id)
    return CompanyWithRatingsResponse(
        company=CompanyResponse.model_validate(company),
        avg_rating=stats.avg_rating,
        review_count=stats.review_count,
        rating_breakdown=stats.distribution,
    )


@router.get(
    "/slug/{slug}",
    response_model=CompanyResponse,
    summary="Get a company by slug",
)
@limiter.limit(settings.rate_limit_default)
def get_company_by_slug(
    request: Request,
    slug: str,
    db: DbSession,
) -> CompanyResponse:
    return CompanyResponse.model_validate(catalog.get_company_by_slug(db, slug))


@router.get(
    "/category/slug/{slug}",
    response_model=list[CompanyResponse],
    summary="Companies of a category, by slug",
    description="Companies filed under any subcategory of the category.",
)
@limiter.limit(settings.rate_limit_default)
def list_companies_by_category_slug(
    request: Request,
    slug: str,
    db: DbSession,
) -> list[CompanyResponse]:
    companies = catalog.companies_by_category_slug(db, slug)
    return [CompanyResponse.model_validate(company) for company in companies]


@router.get(
    "/subcategory/slug/{slug}",
    response_model=list[CompanyResponse],
    summary="Companies of a subcategory, by slug",
)
@limiter.limit(settings.rate_limit_default)
def list_companies_by_subcategory_slug(
    request: Request,
    slug: str,
    db: DbSession,
) -> list[CompanyResponse]:
    companies = catalog.companies_by_subcategory_slug(db, slug)
    return [CompanyResponse.model_validate(company) for company in companies]


@router.get(
    "/category/{category_id}",
    response_model=list[CompanyResponse],
    summary="Companies of a category",
)
@limiter.limit(settings.rate_limit_default)
def list_companies_by_category(
    request: Request,
    category_id: int,
    db: DbSession,
) -> list[CompanyResponse]:
    companies = catalog.list_companies(db, category_id=category_id)
    return [CompanyResponse.model_validate(company) for company in companies]


@router.get(
    "/subcategory/{subcategory_id}",
    response_model=list[CompanyResponse],
    summary="Companies of a subcategory",
)
@limiter.limit(settings.rate_limit_default)
def list_companies_by_subcategory(
    request: Request,
    subcategory_id: int,
    db: DbSession,
) -> list[CompanyResponse]:
    companies = catalog.list_companies(db, subcategory_id=subcategory_id)
    return [CompanyResponse.model_validate(company) for company in companies]


@router.get(
    "/{company_id}/reviews/display",
    response_model=list[ReviewResponse],
    summary="Curated reviews for a company page",
    description="""
    Up to 10 reviews, balanced by star rating according to the company's
    rounded average, in random order. Empty for a company without reviews.
    """,
)
@limiter.limit(settings.rate_limit_default)
def get_display_reviews(
    request: Request,
    company_id: int,
    db: DbSession,
    rng: Rng,
) -> list[ReviewResponse]:
    catalog.get_company(db, company_id)
    reviews = select_display_reviews(db, company_id, rng=rng)
    return [ReviewResponse.model_validate(review) for review in reviews]


# =============================================================================
# Update & Delete
# =============================================================================


@router.put(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Update a company",
    description="Partial update. Changing the name regenerates the slug.",
)
@limiter.limit(settings.rate_limit_write)
def update_company(
    request: Request,
    company_id: int,
    company_data: CompanyUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> CompanyResponse:
    company = catalog.update_company(db, company_id, company_data)
    return CompanyResponse.model_validate(company)


@router.delete(
    "/{company_id}",
    response_model=MessageResponse,
    summary="Delete a company",
    description="Delete a company. Its reviews are kept but no longer shown in feeds.",
)
@limiter.limit(settings.rate_limit_write)
def delete_company(
    request: Request,
    company_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    catalog.delete_company(db, company_id)
    return MessageResponse(message="Company deleted successfully")
