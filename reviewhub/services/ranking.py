"""
Ranking Service

"Best companies by category" for the homepage.

Algorithm:
1. Find every category that has at least one company with at least one review
2. Draw `category_count` of them uniformly at random, without replacement
   (a fresh draw on every call, nothing is cached)
3. Within each drawn category rank the reviewed companies by
   average rating desc, then review count desc
4. Keep the top `per_category` and attach each one's best review
   (highest rating, most recent first)
5. Number the survivors 1..k

A drawn category that ends up with no ranked company is dropped, so fewer
than `category_count` categories may come back. That is a selection outcome,
not an error.

The random source is injectable so tests can fix the draw:

    best_companies_by_category(db, rng=random.Random(42))
"""

import logging
import random
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from reviewhub.models import Category, Company, Review
from reviewhub.services.ratings import average_rating

logger = logging.getLogger(__name__)


@dataclass
class RankedCompanyEntry:
    """One company inside a category ranking."""

    company: Company
    avg_rating: float
    review_count: int
    best_review: Review | None
    rank: int = 0


@dataclass
class CategoryRanking:
    """A drawn category and its ranked companies."""

    category: Category
    companies: list[RankedCompanyEntry] = field(default_factory=list)


def ranking_sort_key(entry: RankedCompanyEntry) -> tuple:
    """Average desc, review count desc; name and id keep ties deterministic."""
    return (
        -entry.avg_rating,
        -entry.review_count,
        entry.company.name.casefold(),
        entry.company.id,
    )


def reviewed_category_ids(db: Session) -> list[int]:
    """
    IDs of categories with at least one reviewed company.

    Inner joins skip orphaned reviews and companies whose category is gone.
    """
    stmt = (
        select(Category.id)
        .join(Company, Company.category_id == Category.id)
        .join(Review, Review.company_id == Company.id)
        .distinct()
        .order_by(Category.id)
    )
    return list(db.execute(stmt).scalars().all())


def best_review_for_company(db: Session, company_id: int) -> Review | None:
    """Highest rated review of a company; the newest wins a tie."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.company_id == company_id)
        .order_by(Review.rating.desc(), Review.created_at.desc(), Review.id.desc())
        .limit(1)
    )
    return db.execute(stmt).scalar_one_or_none()


def rank_category_companies(
    db: Session,
    category_id: int,
    limit: int,
) -> list[RankedCompanyEntry]:
    """
    Top `limit` reviewed companies of one category, ranked and numbered.

    Args:
        db: Database session
        category_id: Category to rank
        limit: Maximum number of companies to keep

    Returns:
        Entries with rank 1..k and best_review attached
    """
    stmt = (
        select(Company, func.count(Review.id), func.sum(Review.rating))
        .join(Review, Review.company_id == Company.id)
        .where(Company.category_id == category_id)
        .group_by(Company.id)
    )

    entries = [
        RankedCompanyEntry(
            company=company,
            avg_rating=average_rating(int(rating_sum), review_count),
            review_count=review_count,
            best_review=None,
        )
        for company, review_count, rating_sum in db.execute(stmt).all()
        if review_count > 0
    ]

    entries.sort(key=ranking_sort_key)
    entries = entries[:limit]

    for rank, entry in enumerate(entries, start=1):
        entry.rank = rank
        entry.best_review = best_review_for_company(db, entry.company.id)

    return entries


def best_companies_by_category(
    db: Session,
    category_count: int = 6,
    per_category: int = 4,
    rng: random.Random | None = None,
) -> list[CategoryRanking]:
    """
    Randomly drawn categories, each with its best-rated companies.

    Args:
        db: Database session
        category_count: How many categories to draw
        per_category: How many companies to rank per category
        rng: Random source for the category draw

    Returns:
        One CategoryRanking per drawn category that has ranked companies
    """
    rng = rng or random.Random()

    candidates = reviewed_category_ids(db)
    if not candidates:
        return []

    drawn = rng.sample(candidates, min(category_count, len(candidates)))

    categories = {
        category.id: category
        for category in db.execute(
            select(Category).where(Category.id.in_(drawn))
        ).scalars().all()
    }

    logger.info(
        f"Ranking {len(drawn)} of {len(candidates)} reviewed categories: "
        f"{[categories[cid].name for cid in drawn if cid in categories]}"
    )

    results = []
    for category_id in drawn:
        category = categories.get(category_id)
        if category is None:
            continue

        entries = rank_category_companies(db, category_id, per_category)
        if not entries:
            logger.debug(f"Dropping category '{category.name}': no ranked companies")
            continue

        results.append(CategoryRanking(category=category, companies=entries))

    return results
