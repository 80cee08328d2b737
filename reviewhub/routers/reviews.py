"""
Reviews Router

Endpoints:
- POST /reviews - Create a review (authenticated)
- GET /reviews - Most recent reviews (homepage)
- GET /reviews/browse-mixed - Shuffled, paginated review feed
- GET /reviews/stats/{company_id} - Rating statistics of a company
- GET /reviews/company/{company_id} - All reviews of a company
- GET /reviews/user/{user_id} - All reviews written by a user
- GET /reviews/{review_id} - Single review
- PUT /reviews/{review_id} - Update own review (authenticated)
- DELETE /reviews/{review_id} - Delete own review (authenticated)

Business Rules:
- One review per user per company (409 on a second attempt)
- Only the author can update or delete a review (403 otherwise)
- Statistics are recomputed from the current reviews on every request
"""

import logging

from fastapi import APIRouter, Request, status

from reviewhub.config import get_settings
from reviewhub.dependencies import ActiveUser, DbSession, Pagination, Rng
from reviewhub.schemas.common import MessageResponse, PageInfoResponse
from reviewhub.schemas.feed import MixedReviewPageResponse
from reviewhub.schemas.review import (
    RatingStatsResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from reviewhub.services import catalog, reviews
from reviewhub.services.feeds import browse_mixed, recent_reviews
from reviewhub.services.rate_limiter import limiter
from reviewhub.services.ratings import get_company_stats

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={
        404: {"description": "Review or company not found"},
    },
)


# =============================================================================
# Create
# =============================================================================


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="""
    Review a company as the authenticated user.

    - **rating**: whole number from 1 to 5
    - **comment**: 10 to 1000 characters
    - **title**: optional, at most 100 characters, defaults to "Review"

    A user can review each company only once.
    """,
    responses={
        409: {"description": "User already reviewed this company"},
    },
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    review = reviews.create_review(db, current_user, review_data)
    return ReviewResponse.model_validate(review)


# =============================================================================
# Feeds
# =============================================================================


@router.get(
    "",
    response_model=list[ReviewResponse],
    summary="Recent reviews",
    description="The newest reviews across all companies.",
)
@limiter.limit(settings.rate_limit_default)
def list_recent_reviews(
    request: Request,
    db: DbSession,
) -> list[ReviewResponse]:
    return [
        ReviewResponse.model_validate(review)
        for review in recent_reviews(db, limit=settings.recent_reviews_limit)
    ]


@router.get(
    "/browse-mixed",
    response_model=MixedReviewPageResponse,
    summary="Browse reviews in random order",
    description="""
    A page of reviews in a freshly shuffled order.

    The order is drawn again on every request, so paging through the feed
    can repeat or skip reviews.
    """,
)
@limiter.limit(settings.rate_limit_default)
def browse_mixed_reviews(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    rng: Rng,
) -> MixedReviewPageResponse:
    page = browse_mixed(db, page=pagination.page, limit=pagination.limit, rng=rng)
    return MixedReviewPageResponse(
        reviews=[ReviewResponse.model_validate(review) for review in page.reviews],
        pagination=PageInfoResponse.model_validate(page.pagination),
    )


@router.get(
    "/stats/{company_id}",
    response_model=RatingStatsResponse,
    summary="Rating statistics of a company",
)
@limiter.limit(settings.rate_limit_default)
def get_review_stats(
    request: Request,
    company_id: int,
    db: DbSession,
) -> RatingStatsResponse:
    catalog.get_company(db, company_id)
    stats = get_company_stats(db, company_id)
    return RatingStatsResponse(
        company_id=company_id,
        avg_rating=stats.avg_rating,
        review_count=stats.review_count,
        distribution=stats.distribution,
    )


@router.get(
    "/company/{company_id}",
    response_model=list[ReviewResponse],
    summary="Reviews of a company",
    description="All reviews of a company, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def list_company_reviews(
    request: Request,
    company_id: int,
    db: DbSession,
) -> list[ReviewResponse]:
    return [
        ReviewResponse.model_validate(review)
        for review in reviews.reviews_for_company(db, company_id)
    ]


@router.get(
    "/user/{user_id}",
    response_model=list[ReviewResponse],
    summary="Reviews written by a user",
    description="All reviews of a user, newest first. Reviews of deleted companies are left out.",
)
@limiter.limit(settings.rate_limit_default)
def list_user_reviews(
    request: Request,
    user_id: int,
    db: DbSession,
) -> list[ReviewResponse]:
    return [
        ReviewResponse.model_validate(review)
        for review in reviews.reviews_by_user(db, user_id)
    ]


# =============================================================================
# Single Review
# =============================================================================


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
) -> ReviewResponse:
    return ReviewResponse.model_validate(reviews.get_review(db, review_id))


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Partial update of rating, title and/or comment. Only the author may update.",
    responses={
        403: {"description": "Not the author of the review"},
    },
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    review = reviews.update_review(db, current_user, review_id, review_data)
    return ReviewResponse.model_validate(review)


@router.delete(
    "/{review_id}",
    response_model=MessageResponse,
    summary="Delete a review",
    responses={
        403: {"description": "Not the author of the review"},
    },
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    reviews.delete_review(db, current_user, review_id)
    return MessageResponse(message="Review deleted successfully")
