"""
Feed Service

Paginated and curated review/company feeds for the discovery pages.

Feeds:
- browse_mixed: every review in a random order, paginated
- companies_in_category: a category's companies with rating stats,
  searchable by name and sortable by name or rating
- latest_best_reviews: newest reviews rated 3 stars or better
- recent_reviews: newest reviews of any rating

Joined feeds skip orphaned reviews (company deleted, or company no longer
in a category). The mixed feed's total still counts every review, so the
last page may come back short.
"""

import logging
import math
import random
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from reviewhub.exceptions import NotFoundError
from reviewhub.models import Category, Company, Review, User
from reviewhub.services.ratings import compute_stats_for_companies

logger = logging.getLogger(__name__)

SORT_BY_NAME = "name"
SORT_BY_RATING = "rating"


@dataclass
class PageInfo:
    """Pagination block shared by the paginated feeds."""

    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool
    limit: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageInfo":
        total_pages = math.ceil(total / limit) if total > 0 else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
            limit=limit,
        )


@dataclass
class MixedReviewPage:
    reviews: list[Review]
    pagination: PageInfo


@dataclass
class CompanyWithStats:
    company: Company
    avg_rating: float = 0.0
    review_count: int = 0


@dataclass
class CategoryCompanyPage:
    category: Category
    companies: list[CompanyWithStats] = field(default_factory=list)
    pagination: PageInfo | None = None


def page_offset(page: int, limit: int) -> int:
    """0-based offset of a 1-based page."""
    return (page - 1) * limit


def _joined_reviews_stmt():
    """Reviews whose company, category and author all resolve."""
    return (
        select(Review)
        .join(Company, Review.company_id == Company.id)
        .join(Category, Company.category_id == Category.id)
        .join(User, Review.user_id == User.id)
    )


def _with_review_relations(stmt):
    return stmt.options(
        selectinload(Review.user),
        selectinload(Review.company).selectinload(Company.category),
    )


# =============================================================================
# Mixed Review Browse
# =============================================================================


def browse_mixed(
    db: Session,
    page: int = 1,
    limit: int = 20,
    rng: random.Random | None = None,
) -> MixedReviewPage:
    """
    One page of all reviews in a freshly shuffled order.

    Every call assigns a new random key to every joined review, sorts by it
    and slices the requested page, so paging through the feed is not
    stable across calls.

    Args:
        db: Database session
        page: 1-based page number
        limit: Page size
        rng: Random source for the sort keys

    Returns:
        The page of reviews and a pagination block whose total is the full
        review count
    """
    rng = rng or random.Random()

    ids = db.execute(
        _joined_reviews_stmt().with_only_columns(Review.id).order_by(Review.id)
    ).scalars().all()
    keyed = sorted((rng.random(), review_id) for review_id in ids)

    start = page_offset(page, limit)
    page_ids = [review_id for _, review_id in keyed[start:start + limit]]

    reviews_by_id = {}
    if page_ids:
        reviews_by_id = {
            review.id: review
            for review in db.execute(
                _with_review_relations(select(Review).where(Review.id.in_(page_ids)))
            ).scalars().all()
        }
    reviews = [reviews_by_id[review_id] for review_id in page_ids if review_id in reviews_by_id]

    total = db.execute(select(func.count(Review.id))).scalar() or 0

    logger.debug(f"Mixed browse page {page}: {len(reviews)} of {total} reviews")

    return MixedReviewPage(
        reviews=reviews,
        pagination=PageInfo.build(page, limit, total),
    )


# =============================================================================
# Category Companies
# =============================================================================


def company_sort_key(sort: str):
    """Sort key for company listings."""
    if sort == SORT_BY_RATING:
        return lambda item: (
            -item.avg_rating,
            -item.review_count,
            item.company.name.casefold(),
            item.company.id,
        )
    return lambda item: (item.company.name.casefold(), item.company.id)


def companies_in_category(
    db: Session,
    slug: str,
    page: int = 1,
    limit: int = 30,
    search: str | None = None,
    sort: str = SORT_BY_NAME,
) -> CategoryCompanyPage:
    """
    Paginated companies of a category with their rating stats.

    Companies without reviews are included with avg_rating=0 and
    review_count=0. The whole filtered set is sorted in memory and then
    sliced; the pagination total is the size of that set.

    Args:
        db: Database session
        slug: Category slug
        page: 1-based page number
        limit: Page size
        search: Case-insensitive substring to match against company names
        sort: "rating" for (avg desc, count desc, name asc), else name asc

    Raises:
        NotFoundError: If no category has this slug
    """
    category = db.execute(
        select(Category).where(Category.slug == slug)
    ).scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")

    stmt = (
        select(Company)
        .options(selectinload(Company.category), selectinload(Company.subcategory))
        .where(Company.category_id == category.id)
    )
    companies = list(db.execute(stmt).scalars().all())

    # Matched in Python: SQLite's lower() and LIKE only fold ASCII letters
    term = (search or "").strip().casefold()
    if term:
        companies = [company for company in companies if term in company.name.casefold()]

    stats = compute_stats_for_companies(db, [company.id for company in companies])
    items = [
        CompanyWithStats(
            company=company,
            avg_rating=stats[company.id].avg_rating,
            review_count=stats[company.id].review_count,
        )
        for company in companies
    ]
    items.sort(key=company_sort_key(sort))

    start = page_offset(page, limit)
    return CategoryCompanyPage(
        category=category,
        companies=items[start:start + limit],
        pagination=PageInfo.build(page, limit, len(items)),
    )


# =============================================================================
# Latest Reviews
# =============================================================================


def latest_best_reviews(
    db: Session,
    limit: int = 25,
    min_rating: int = 3,
) -> list[Review]:
    """Newest joined reviews rated at least `min_rating`."""
    stmt = _with_review_relations(
        _joined_reviews_stmt()
        .where(Review.rating >= min_rating)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def recent_reviews(db: Session, limit: int = 50) -> list[Review]:
    """Newest reviews of any rating whose company still exists."""
    stmt = _with_review_relations(
        select(Review)
        .join(Company, Review.company_id == Company.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())
