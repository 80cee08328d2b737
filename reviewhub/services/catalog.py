"""
Catalog Service

Category, subcategory and company management.

Slugs:
    Every category, subcategory and company gets a URL slug derived from its
    name: lowercased, characters outside [a-z0-9 -] removed, whitespace
    turned into "-", repeated "-" collapsed.

        slugify("Acme & Sons, Inc.")  ->  "acme-sons-inc"

    Collisions get a numeric suffix: "acme", "acme-1", "acme-2", ... The
    search is bounded by settings.slug_max_attempts. A slug taken by another
    writer between the lookup and the insert is caught by the unique index;
    the insert is then retried with the next free suffix.

General fallback:
    A company created without category and subcategory is filed under the
    "General" category and its "General" subcategory, created on first use.

Cascade deletes:
    Deleting a category removes its companies, then its subcategories, then
    the category. Deleting a subcategory removes its companies, then the
    subcategory. Each step commits on its own; a failure partway leaves the
    earlier steps applied. Reviews of deleted companies stay in the table
    with company_id NULL and are skipped by the feeds.
"""

import logging
import re

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from reviewhub.config import get_settings
from reviewhub.exceptions import ConflictError, NotFoundError, ValidationError
from reviewhub.models import Category, Company, Subcategory
from reviewhub.schemas.category import CategoryCreate, SubcategoryCreate
from reviewhub.schemas.company import CompanyCreate, CompanyUpdate

logger = logging.getLogger(__name__)

GENERAL_NAME = "General"
GENERAL_CATEGORY_DESCRIPTION = "General category for miscellaneous companies"
GENERAL_SUBCATEGORY_DESCRIPTION = "General subcategory"

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_HYPHENS = re.compile(r"-+")


# =============================================================================
# Slugs
# =============================================================================


def slugify(text: str) -> str:
    """
    URL-friendly form of a name.

    Examples:
        >>> slugify("Acme Corp")
        'acme-corp'
        >>> slugify("  Café -- Bar  ")
        'caf-bar'
    """
    slug = _DISALLOWED_CHARS.sub("", text.lower())
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")


def unique_slug(db: Session, model, name: str, exclude_id: int | None = None) -> str:
    """
    First free slug for `name` among rows of `model`.

    Args:
        db: Database session
        model: Mapped class with a `slug` column (Category, Subcategory, Company)
        name: Name to derive the slug from
        exclude_id: Row to ignore, so a record keeps its own slug on update

    Raises:
        ValidationError: If the name yields an empty slug
        ConflictError: If no free suffix is found within slug_max_attempts
    """
    base = slugify(name)
    if not base:
        raise ValidationError("Name must contain at least one letter or digit")

    max_attempts = get_settings().slug_max_attempts
    for attempt in range(max_attempts + 1):
        candidate = base if attempt == 0 else f"{base}-{attempt}"

        stmt = select(model.id).where(model.slug == candidate)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)

        if db.execute(stmt).first() is None:
            return candidate

    logger.warning(f"No free slug for '{name}' after {max_attempts} suffixes")
    raise ConflictError(f"Could not generate a unique slug for '{name}'")


def _is_slug_violation(error: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: companies.slug"
    # PostgreSQL: 'duplicate key value violates unique constraint "ix_companies_slug"'
    return "slug" in str(error.orig).lower()


def _flush_with_free_slug(db: Session, record, name: str, conflict_message: str) -> None:
    """
    Give `record` the first free slug for `name` and flush it.

    Another writer can take the same slug between the lookup and the insert.
    The flush runs in a savepoint, so on a slug collision only that attempt
    is undone and the next free suffix is tried, at most slug_max_attempts
    times.

    Raises:
        ConflictError: If a non-slug constraint fails, or every attempt collides
    """
    max_attempts = get_settings().slug_max_attempts
    for _ in range(max_attempts):
        # A rolled-back savepoint expunges a new record and expires a changed one
        slug = unique_slug(db, type(record), name, exclude_id=record.id)
        record.name = name
        record.slug = slug
        db.add(record)
        try:
            with db.begin_nested():
                db.flush()
            return
        except IntegrityError as e:
            if not _is_slug_violation(e):
                logger.warning(f"Catalog write rejected by the database: {e.orig}")
                raise ConflictError(conflict_message) from e
            logger.warning(f"Slug '{slug}' was taken by a concurrent write, retrying")

    logger.warning(f"No free slug for '{name}' after {max_attempts} write attempts")
    raise ConflictError(f"Could not generate a unique slug for '{name}'")


def _commit(db: Session, conflict_message: str) -> None:
    """Commit, mapping a uniqueness violation to ConflictError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Catalog write rejected by the database: {e.orig}")
        raise ConflictError(conflict_message) from e


# =============================================================================
# Lookups
# =============================================================================


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def get_category_by_slug(db: Session, slug: str) -> Category:
    category = db.execute(
        select(Category).where(Category.slug == slug)
    ).scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


def get_subcategory(db: Session, subcategory_id: int) -> Subcategory:
    subcategory = db.get(Subcategory, subcategory_id)
    if subcategory is None:
        raise NotFoundError("Subcategory not found")
    return subcategory


def get_subcategory_by_slug(db: Session, slug: str) -> Subcategory:
    subcategory = db.execute(
        select(Subcategory).where(Subcategory.slug == slug)
    ).scalar_one_or_none()
    if subcategory is None:
        raise NotFoundError("Subcategory not found")
    return subcategory


def get_company(db: Session, company_id: int) -> Company:
    company = db.execute(
        select(Company)
        .options(selectinload(Company.category), selectinload(Company.subcategory))
        .where(Company.id == company_id)
    ).scalar_one_or_none()
    if company is None:
        raise NotFoundError("Company not found")
    return company


def get_company_by_slug(db: Session, slug: str) -> Company:
    company = db.execute(
        select(Company)
        .options(selectinload(Company.category), selectinload(Company.subcategory))
        .where(Company.slug == slug)
    ).scalar_one_or_none()
    if company is None:
        raise NotFoundError("Company not found")
    return company


# =============================================================================
# Listings
# =============================================================================


def list_categories(db: Session) -> list[Category]:
    """All categories by name, with their subcategories loaded."""
    stmt = (
        select(Category)
        .options(selectinload(Category.subcategories))
        .order_by(Category.name)
    )
    return list(db.execute(stmt).scalars().all())


def list_subcategories(db: Session, category_id: int | None = None) -> list[Subcategory]:
    stmt = (
        select(Subcategory)
        .options(selectinload(Subcategory.category))
        .order_by(Subcategory.name, Subcategory.id)
    )
    if category_id is not None:
        stmt = stmt.where(Subcategory.category_id == category_id)
    return list(db.execute(stmt).scalars().all())


def list_companies(
    db: Session,
    category_id: int | None = None,
    subcategory_id: int | None = None,
) -> list[Company]:
    """Companies by name, optionally filtered by category and/or subcategory."""
    stmt = (
        select(Company)
        .options(selectinload(Company.category), selectinload(Company.subcategory))
        .order_by(Company.name, Company.id)
    )
    if category_id is not None:
        stmt = stmt.where(Company.category_id == category_id)
    if subcategory_id is not None:
        stmt = stmt.where(Company.subcategory_id == subcategory_id)
    return list(db.execute(stmt).scalars().all())


def companies_in_subcategory(
    db: Session,
    category_slug: str,
    subcategory_slug: str,
) -> list[Company]:
    """
    Companies of the subcategory with `subcategory_slug` under `category_slug`.

    Raises:
        NotFoundError: If the category, or the subcategory within it, is unknown
    """
    category = get_category_by_slug(db, category_slug)

    subcategory = db.execute(
        select(Subcategory).where(
            Subcategory.slug == subcategory_slug,
            Subcategory.category_id == category.id,
        )
    ).scalar_one_or_none()
    if subcategory is None:
        raise NotFoundError("Subcategory not found")

    return list_companies(db, subcategory_id=subcategory.id)


def companies_by_category_slug(db: Session, slug: str) -> list[Company]:
    """
    Companies filed under any subcategory of the category with `slug`.

    Placement goes by subcategory, so a company whose own category_id points
    elsewhere is still listed when its subcategory belongs here.

    Raises:
        NotFoundError: If no category has this slug
    """
    category = get_category_by_slug(db, slug)

    subcategory_ids = select(Subcategory.id).where(Subcategory.category_id == category.id)
    stmt = (
        select(Company)
        .options(selectinload(Company.category), selectinload(Company.subcategory))
        .where(Company.subcategory_id.in_(subcategory_ids))
        .order_by(Company.name, Company.id)
    )
    return list(db.execute(stmt).scalars().all())


def companies_by_subcategory_slug(db: Session, slug: str) -> list[Company]:
    """Companies of the subcategory with `slug`, whatever its category."""
    subcategory = get_subcategory_by_slug(db, slug)
    return list_companies(db, subcategory_id=subcategory.id)


# =============================================================================
# Categories & Subcategories
# =============================================================================


def create_category(db: Session, data: CategoryCreate) -> Category:
    """
    Create a category with a derived slug.

    Raises:
        ConflictError: If a category with this name already exists
    """
    existing = db.execute(
        select(Category.id).where(Category.name == data.name)
    ).first()
    if existing is not None:
        raise ConflictError(f"Category '{data.name}' already exists")

    category = Category(description=data.description)
    conflict_message = f"Category '{data.name}' already exists"
    _flush_with_free_slug(db, category, data.name, conflict_message)
    _commit(db, conflict_message)
    db.refresh(category)

    logger.info(f"Created category '{category.name}' ({category.slug})")
    return category


def create_subcategory(db: Session, data: SubcategoryCreate) -> Subcategory:
    """
    Create a subcategory under an existing category.

    Raises:
        NotFoundError: If the parent category does not exist
    """
    category = get_category(db, data.category_id)

    subcategory = Subcategory(description=data.description, category_id=category.id)
    conflict_message = f"Subcategory '{data.name}' already exists"
    _flush_with_free_slug(db, subcategory, data.name, conflict_message)
    _commit(db, conflict_message)
    db.refresh(subcategory)

    logger.info(
        f"Created subcategory '{subcategory.name}' ({subcategory.slug}) "
        f"in '{category.name}'"
    )
    return subcategory


def move_subcategory(db: Session, subcategory_id: int, new_category_id: int) -> Subcategory:
    """
    Re-parent a subcategory.

    Companies keep their own category_id; only the subcategory moves.

    Raises:
        NotFoundError: If the subcategory or the target category is unknown
    """
    subcategory = get_subcategory(db, subcategory_id)
    category = get_category(db, new_category_id)

    subcategory.category_id = category.id
    db.commit()
    db.refresh(subcategory)

    logger.info(f"Moved subcategory {subcategory.id} to category '{category.name}'")
    return subcategory


def get_or_create_general(db: Session) -> tuple[Category, Subcategory]:
    """
    The General category and its General subcategory, created if missing.

    Idempotent: repeated calls return the same pair.
    """
    category = db.execute(
        select(Category).where(Category.name == GENERAL_NAME)
    ).scalar_one_or_none()
    if category is None:
        category = Category(description=GENERAL_CATEGORY_DESCRIPTION)
        _flush_with_free_slug(db, category, GENERAL_NAME, "General category already exists")
        _commit(db, "General category already exists")
        db.refresh(category)
        logger.info("Created General category")

    subcategory = db.execute(
        select(Subcategory).where(
            Subcategory.name == GENERAL_NAME,
            Subcategory.category_id == category.id,
        )
    ).scalar_one_or_none()
    if subcategory is None:
        subcategory = Subcategory(
            description=GENERAL_SUBCATEGORY_DESCRIPTION,
            category_id=category.id,
        )
        _flush_with_free_slug(
            db, subcategory, GENERAL_NAME, "General subcategory already exists"
        )
        _commit(db, "General subcategory already exists")
        db.refresh(subcategory)
        logger.info("Created General subcategory")

    return category, subcategory


# =============================================================================
# Companies
# =============================================================================


def _resolve_placement(
    db: Session,
    category_id: int | None,
    subcategory_id: int | None,
) -> tuple[int, int | None]:
    """
    Category and subcategory ids a company should be filed under.

    Raises:
        NotFoundError: If a given id does not exist
        ValidationError: If the subcategory belongs to another category
    """
    if category_id is None and subcategory_id is None:
        category, subcategory = get_or_create_general(db)
        return category.id, subcategory.id

    if subcategory_id is None:
        return get_category(db, category_id).id, None

    subcategory = get_subcategory(db, subcategory_id)
    if category_id is None:
        return subcategory.category_id, subcategory.id

    category = get_category(db, category_id)
    if subcategory.category_id != category.id:
        raise ValidationError("Subcategory does not belong to the given category")
    return category.id, subcategory.id


def create_company(db: Session, data: CompanyCreate) -> Company:
    """
    Create a company with a derived, unique slug.

    Raises:
        NotFoundError: If a given category or subcategory does not exist
        ValidationError: If the subcategory belongs to another category
    """
    category_id, subcategory_id = _resolve_placement(
        db, data.category_id, data.subcategory_id
    )

    company = Company(
        url=data.url,
        logo=data.logo or "",
        description=data.description,
        category_id=category_id,
        subcategory_id=subcategory_id,
    )
    _flush_with_free_slug(db, company, data.name, "Company could not be saved")
    _commit(db, f"A company with slug '{company.slug}' already exists")

    logger.info(f"Created company '{company.name}' ({company.slug})")
    return get_company(db, company.id)


def update_company(db: Session, company_id: int, data: CompanyUpdate) -> Company:
    """
    Partially update a company.

    A new name regenerates the slug (the company's own slug is not treated as
    a collision). Moving to a subcategory without naming a category moves the
    company to the subcategory's category as well.

    Raises:
        NotFoundError: If the company, category or subcategory does not exist
        ValidationError: If the subcategory belongs to another category
    """
    company = get_company(db, company_id)
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }

    for field in ("url", "logo", "description"):
        if field in changes:
            setattr(company, field, changes[field])

    if "category_id" in changes or "subcategory_id" in changes:
        category_id = changes.get("category_id")
        subcategory_id = changes.get("subcategory_id")
        if category_id is not None and subcategory_id is None:
            # Keep the current subcategory only if it still fits
            current = company.subcategory
            if current is not None and current.category_id == category_id:
                subcategory_id = current.id
        company.category_id, company.subcategory_id = _resolve_placement(
            db, category_id, subcategory_id
        )

    if "name" in changes and changes["name"] != company.name:
        # Other changes go out first so a slug retry cannot undo them
        db.flush()
        _flush_with_free_slug(db, company, changes["name"], "Company could not be saved")

    _commit(db, f"A company with slug '{company.slug}' already exists")

    logger.info(f"Updated company {company.id}: {sorted(changes)}")
    db.expire(company)
    return get_company(db, company.id)


def delete_company(db: Session, company_id: int) -> None:
    """
    Delete a company. Its reviews stay behind as orphans.

    Raises:
        NotFoundError: If the company does not exist
    """
    company = get_company(db, company_id)
    db.delete(company)
    db.commit()
    logger.info(f"Deleted company {company_id}")


def delete_subcategory(db: Session, subcategory_id: int) -> None:
    """
    Delete a subcategory and the companies filed under it.

    Raises:
        NotFoundError: If the subcategory does not exist
    """
    subcategory = get_subcategory(db, subcategory_id)

    result = db.execute(
        delete(Company).where(Company.subcategory_id == subcategory.id)
    )
    db.commit()
    logger.info(f"Subcategory {subcategory_id}: deleted {result.rowcount} companies")

    db.delete(subcategory)
    db.commit()
    logger.info(f"Deleted subcategory {subcategory_id}")


def delete_category(db: Session, category_id: int) -> None:
    """
    Delete a category, its subcategories and every company in either.

    Steps run in dependency order and commit one by one:
    1. Companies whose category or subcategory is part of the category
    2. The subcategories
    3. The category

    Raises:
        NotFoundError: If the category does not exist
    """
    category = get_category(db, category_id)
    subcategory_ids = list(
        db.execute(
            select(Subcategory.id).where(Subcategory.category_id == category.id)
        ).scalars().all()
    )

    company_filter = Company.category_id == category.id
    if subcategory_ids:
        company_filter = or_(company_filter, Company.subcategory_id.in_(subcategory_ids))
    result = db.execute(delete(Company).where(company_filter))
    db.commit()
    logger.info(f"Category {category_id}: deleted {result.rowcount} companies")

    result = db.execute(
        delete(Subcategory).where(Subcategory.category_id == category.id)
    )
    db.commit()
    logger.info(f"Category {category_id}: deleted {result.rowcount} subcategories")

    db.delete(category)
    db.commit()
    logger.info(f"Deleted category {category_id}")
