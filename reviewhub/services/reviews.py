"""
Review Lifecycle Service

Create, update and delete reviews while enforcing the review invariants:

- Rating is an integer 1-5
- Comment is 10-1000 characters after trimming
- Title is at most 100 characters, blank titles fall back to "Review"
- One review per user per company
- Only the author may edit or delete a review

The request schemas already apply the same rules; they are re-checked here so
the service is safe to call outside a request (seed scripts, tests).

Every successful write drops the company's cached rating stats.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from reviewhub.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from reviewhub.models import Company, Review, User
from reviewhub.models.review import (
    COMMENT_MAX_LENGTH,
    COMMENT_MIN_LENGTH,
    DEFAULT_REVIEW_TITLE,
    RATING_MAX,
    RATING_MIN,
    TITLE_MAX_LENGTH,
)
from reviewhub.schemas.review import ReviewCreate, ReviewUpdate
from reviewhub.services.ratings import invalidate_company_stats

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this company"


# =============================================================================
# Field Rules
# =============================================================================


def clean_rating(rating) -> int:
    """Reject anything that is not an integer star value."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number between 1 and 5")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError("Rating must be a whole number between 1 and 5")
    return rating


def clean_comment(comment: str | None) -> str:
    text = (comment or "").strip()
    if len(text) < COMMENT_MIN_LENGTH:
        raise ValidationError(
            f"Comment must be at least {COMMENT_MIN_LENGTH} characters long"
        )
    if len(text) > COMMENT_MAX_LENGTH:
        raise ValidationError(
            f"Comment cannot be more than {COMMENT_MAX_LENGTH} characters"
        )
    return text


def clean_title(title: str | None) -> str:
    text = (title or "").strip()
    if len(text) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title cannot be more than {TITLE_MAX_LENGTH} characters"
        )
    return text or DEFAULT_REVIEW_TITLE


# =============================================================================
# Lookups
# =============================================================================


def get_review(db: Session, review_id: int) -> Review:
    """Review with author and company loaded, or NotFoundError."""
    stmt = (
        select(Review)
        .options(
            selectinload(Review.user),
            selectinload(Review.company).selectinload(Company.category),
        )
        .where(Review.id == review_id)
    )
    review = db.execute(stmt).scalar_one_or_none()
    if review is None:
        raise NotFoundError("Review not found")
    return review


def get_owned_review(db: Session, user: User, review_id: int) -> Review:
    review = get_review(db, review_id)
    if review.user_id != user.id:
        raise ForbiddenError("Not authorized to modify this review")
    return review


def _commit_review(db: Session) -> None:
    """Commit, mapping a uniqueness violation to ConflictError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Review write rejected by the database: {e.orig}")
        raise ConflictError(DUPLICATE_REVIEW_MESSAGE) from e


# =============================================================================
# Lifecycle
# =============================================================================


def create_review(db: Session, user: User, data: ReviewCreate) -> Review:
    """
    Create a review for a company.

    Args:
        db: Database session
        user: Author of the review
        data: Validated review payload

    Returns:
        The stored review with author and company loaded

    Raises:
        ValidationError: If a field breaks the review rules
        NotFoundError: If the company does not exist
        ConflictError: If the user already reviewed the company
    """
    rating = clean_rating(data.rating)
    comment = clean_comment(data.comment)
    title = clean_title(data.title)

    company = db.get(Company, data.company_id)
    if company is None:
        raise NotFoundError("Company not found")

    existing = db.execute(
        select(Review.id).where(
            Review.company_id == company.id,
            Review.user_id == user.id,
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(DUPLICATE_REVIEW_MESSAGE)

    review = Review(
        company_id=company.id,
        user_id=user.id,
        rating=rating,
        title=title,
        comment=comment,
    )
    db.add(review)
    _commit_review(db)

    invalidate_company_stats(company.id)
    logger.info(
        f"User {user.id} reviewed company {company.id} with {rating} stars "
        f"(review {review.id})"
    )

    return get_review(db, review.id)


def update_review(
    db: Session,
    user: User,
    review_id: int,
    data: ReviewUpdate,
) -> Review:
    """
    Partially update a review.

    Only fields that were provided (and are not None) change; each of them
    is checked with the same rules as on create.

    Raises:
        NotFoundError: If the review does not exist
        ForbiddenError: If the user is not the author
        ValidationError: If a provided field breaks the review rules
    """
    review = get_owned_review(db, user, review_id)

    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }

    if "rating" in changes:
        review.rating = clean_rating(changes["rating"])
    if "comment" in changes:
        review.comment = clean_comment(changes["comment"])
    if "title" in changes:
        review.title = clean_title(changes["title"])

    _commit_review(db)
    invalidate_company_stats(review.company_id)

    logger.info(f"Review {review_id} updated by user {user.id}: {sorted(changes)}")
    return get_review(db, review_id)


def delete_review(db: Session, user: User, review_id: int) -> None:
    """
    Delete a review.

    Raises:
        NotFoundError: If the review does not exist
        ForbiddenError: If the user is not the author
    """
    review = get_owned_review(db, user, review_id)
    company_id = review.company_id

    db.delete(review)
    db.commit()

    invalidate_company_stats(company_id)
    logger.info(f"Review {review_id} deleted by user {user.id}")


# =============================================================================
# Listings
# =============================================================================


def reviews_for_company(db: Session, company_id: int) -> list[Review]:
    """All reviews of a company, newest first."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.company_id == company_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def reviews_by_user(db: Session, user_id: int) -> list[Review]:
    """All reviews written by a user whose company still exists, newest first."""
    stmt = (
        select(Review)
        .join(Company, Review.company_id == Company.id)
        .options(
            selectinload(Review.user),
            selectinload(Review.company).selectinload(Company.category),
        )
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.execute(stmt).scalars().all())
