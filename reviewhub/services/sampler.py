"""
Curated Review Sampler

Picks up to 10 reviews to show on a company page.

Showing the newest ten reviews tends to produce a wall of five-star (or
one-star) reviews. Instead the company's average rating is rounded to a
tier and each star rating gets a cap:

    tier >= 4  5★ x6  4★ x3  3★ x1
    tier == 3  5★ x2  4★ x3  3★ x3  2★ x2
    tier <= 2  5★ x1  4★ x2  3★ x3  2★ x2  1★ x2

Caps are maxima: a star rating with fewer reviews contributes what it has
and the unused quota is not handed to other star ratings. Within a star
rating the newest reviews are taken first. The selection is then shuffled;
the shuffled order is the presentation order.
"""

import logging
import random

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from reviewhub.models import Company, Review
from reviewhub.services.ratings import mean_rating, round_half_up

logger = logging.getLogger(__name__)

MAX_DISPLAY_REVIEWS = 10

HIGH_TIER_QUOTAS = {5: 6, 4: 3, 3: 1}
AVERAGE_TIER_QUOTAS = {5: 2, 4: 3, 3: 3, 2: 2}
LOW_TIER_QUOTAS = {5: 1, 4: 2, 3: 3, 2: 2, 1: 2}


def rating_tier(ratings: list[int]) -> int:
    """Mean rating rounded to the nearest star, halves rounding up."""
    return int(round_half_up(mean_rating(sum(ratings), len(ratings))))


def quotas_for_tier(tier: int) -> dict[int, int]:
    """Per-star caps for a tier."""
    if tier >= 4:
        return HIGH_TIER_QUOTAS
    if tier == 3:
        return AVERAGE_TIER_QUOTAS
    return LOW_TIER_QUOTAS


def stratified_take(reviews: list[Review], tier: int) -> list[Review]:
    """
    Apply the tier's caps to `reviews`.

    Reviews are taken in the order given, highest star rating first.
    """
    selected = []
    for star, cap in quotas_for_tier(tier).items():
        stratum = [review for review in reviews if review.rating == star]
        selected.extend(stratum[:cap])
    return selected


def select_display_reviews(
    db: Session,
    company_id: int,
    rng: random.Random | None = None,
) -> list[Review]:
    """
    Curated, shuffled sample of a company's reviews.

    Args:
        db: Database session
        company_id: ID of the company
        rng: Random source for the shuffle

    Returns:
        At most 10 reviews with user and company (and its category) loaded
    """
    rng = rng or random.Random()

    stmt = (
        select(Review)
        .where(Review.company_id == company_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    reviews = list(db.execute(stmt).scalars().all())
    if not reviews:
        return []

    tier = rating_tier([review.rating for review in reviews])
    selected = stratified_take(reviews, tier)
    rng.shuffle(selected)
    selected = selected[:MAX_DISPLAY_REVIEWS]

    logger.debug(
        f"Company {company_id}: tier {tier}, "
        f"showing {len(selected)} of {len(reviews)} reviews"
    )

    # Re-fetch with relationships loaded, keeping the shuffled order
    ids = [review.id for review in selected]
    populated = {
        review.id: review
        for review in db.execute(
            select(Review)
            .options(
                selectinload(Review.user),
                selectinload(Review.company).selectinload(Company.category),
            )
            .where(Review.id.in_(ids))
        ).scalars().all()
    }
    return [populated[review_id] for review_id in ids if review_id in populated]
