"""
Ratings Service

Rating aggregation for companies. Nothing here is persisted: every call
recomputes the statistics from the current review set, so an edit or delete
is reflected on the very next request.

For a company with reviews rated [5, 5, 5, 4, 3]:

    RatingStats(
        avg_rating=4.4,
        review_count=5,
        distribution={1: 0, 2: 0, 3: 1, 4: 1, 5: 3},
    )

Averages are rounded half-up (4.25 -> 4.3, 2.5 -> 3), not with Python's
round-half-to-even.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reviewhub.models.review import RATING_MAX, RATING_MIN, Review
from reviewhub.services.cache import cache_delete, cache_get, cache_set, make_cache_key

logger = logging.getLogger(__name__)

STAR_VALUES = range(RATING_MIN, RATING_MAX + 1)


def empty_distribution() -> dict[int, int]:
    """Distribution with every star present and zero counts."""
    return {star: 0 for star in STAR_VALUES}


@dataclass
class RatingStats:
    """Derived per-company statistics. Never stored."""

    avg_rating: float = 0.0
    review_count: int = 0
    distribution: dict[int, int] = field(default_factory=empty_distribution)

    def to_dict(self) -> dict:
        return {
            "avg_rating": self.avg_rating,
            "review_count": self.review_count,
            "distribution": dict(self.distribution),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RatingStats":
        distribution = empty_distribution()
        for star, count in data.get("distribution", {}).items():
            distribution[int(star)] = int(count)
        return cls(
            avg_rating=float(data.get("avg_rating", 0.0)),
            review_count=int(data.get("review_count", 0)),
            distribution=distribution,
        )


def round_half_up(value: float | Decimal, places: int = 0) -> Decimal:
    """
    Round with ties going away from zero.

    Examples:
        >>> round_half_up(Decimal("4.25"), 1)
        Decimal('4.3')
        >>> round_half_up(2.5)
        Decimal('3')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def mean_rating(rating_sum: int, review_count: int) -> Decimal:
    """Exact mean of integer ratings, 0 when there are no reviews."""
    if review_count == 0:
        return Decimal(0)
    return Decimal(rating_sum) / Decimal(review_count)


def average_rating(rating_sum: int, review_count: int) -> float:
    """Mean rating rounded half-up to one decimal place."""
    return float(round_half_up(mean_rating(rating_sum, review_count), 1))


def stats_from_distribution(distribution: dict[int, int]) -> RatingStats:
    """Build RatingStats from a (possibly sparse) star -> count mapping."""
    full = empty_distribution()
    for star, count in distribution.items():
        full[int(star)] = int(count)

    review_count = sum(full.values())
    rating_sum = sum(star * count for star, count in full.items())

    return RatingStats(
        avg_rating=average_rating(rating_sum, review_count),
        review_count=review_count,
        distribution=full,
    )


def compute_stats(db: Session, company_id: int) -> RatingStats:
    """
    Compute rating statistics for a single company.

    A company without reviews (or an unknown id) yields zero stats rather
    than an error.

    Args:
        db: Database session
        company_id: ID of the company

    Returns:
        RatingStats with average, count and full 1-5 distribution
    """
    stmt = (
        select(Review.rating, func.count(Review.id))
        .where(Review.company_id == company_id)
        .group_by(Review.rating)
    )
    distribution = {rating: count for rating, count in db.execute(stmt).all()}
    return stats_from_distribution(distribution)


def compute_stats_for_companies(
    db: Session,
    company_ids: list[int],
) -> dict[int, RatingStats]:
    """
    Batch variant of compute_stats.

    One grouped query for all companies; every requested id is present in
    the result, companies without reviews map to zero stats.
    """
    results = {company_id: RatingStats() for company_id in company_ids}
    if not company_ids:
        return results

    stmt = (
        select(Review.company_id, Review.rating, func.count(Review.id))
        .where(Review.company_id.in_(company_ids))
        .group_by(Review.company_id, Review.rating)
    )

    distributions: dict[int, dict[int, int]] = {}
    for company_id, rating, count in db.execute(stmt).all():
        distributions.setdefault(company_id, {})[rating] = count

    for company_id, distribution in distributions.items():
        results[company_id] = stats_from_distribution(distribution)

    return results


# =============================================================================
# Read-through cache
# =============================================================================


def stats_cache_key(company_id: int) -> str:
    return make_cache_key("company_stats", company_id)


def get_company_stats(db: Session, company_id: int) -> RatingStats:
    """
    compute_stats behind the optional Redis cache.

    With the cache disabled or unreachable this is exactly compute_stats.
    """
    key = stats_cache_key(company_id)
    cached = cache_get(key)
    if cached is not None:
        return RatingStats.from_dict(cached)

    stats = compute_stats(db, company_id)
    cache_set(key, stats.to_dict())
    return stats


def invalidate_company_stats(company_id: int | None) -> None:
    """Drop cached stats for a company after one of its reviews changed."""
    if company_id is None:
        return
    cache_delete(stats_cache_key(company_id))
