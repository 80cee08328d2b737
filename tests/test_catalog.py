"""
Tests for the Catalog Service

Slugs, the General fallback, company placement and the cascading deletes
that leave reviews behind as orphans.
"""

from itertools import count

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from reviewhub.exceptions import ConflictError, NotFoundError, ValidationError
from reviewhub.models import Category, Company, Review, Subcategory
from reviewhub.schemas.category import CategoryCreate, SubcategoryCreate
from reviewhub.schemas.company import CompanyCreate, CompanyUpdate
from reviewhub.services import catalog


class TestSlugify:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Acme Corp", "acme-corp"),
            ("  Leading and trailing  ", "leading-and-trailing"),
            ("Food & Drink", "food-drink"),
            ("Nonna's Kitchen", "nonnas-kitchen"),
            ("a -- b", "a-b"),
            ("-Edge-", "edge"),
        ],
    )
    def test_slugify(self, name: str, expected: str):
        assert catalog.slugify(name) == expected

    def test_slugify_nothing_left(self):
        assert catalog.slugify("!!!") == ""


class TestUniqueSlug:
    def test_free_slug(self, db_session: Session):
        assert catalog.unique_slug(db_session, Company, "Acme") == "acme"

    def test_numeric_suffix(self, db_session: Session, make_company):
        make_company("Acme", slug="acme")
        make_company("Acme 1", slug="acme-1")

        assert catalog.unique_slug(db_session, Company, "ACME") == "acme-2"

    def test_own_slug_is_not_a_collision(self, db_session: Session, make_company):
        company = make_company("Acme", slug="acme")

        slug = catalog.unique_slug(db_session, Company, "Acme", exclude_id=company.id)

        assert slug == "acme"

    def test_empty_slug_rejected(self, db_session: Session):
        with pytest.raises(ValidationError):
            catalog.unique_slug(db_session, Company, "???")

    def test_gives_up_after_max_attempts(self, db_session: Session, make_company, monkeypatch):
        monkeypatch.setattr(catalog.get_settings(), "slug_max_attempts", 2)
        make_company("Acme", slug="acme")
        make_company("Acme one", slug="acme-1")
        make_company("Acme two", slug="acme-2")

        with pytest.raises(ConflictError):
            catalog.unique_slug(db_session, Company, "Acme")


class TestSlugTakenAtWriteTime:
    """Another writer takes the chosen slug between the lookup and the insert."""

    @staticmethod
    def stale_lookup(monkeypatch, stale_slug: str, times: int = 1) -> None:
        """The first `times` slug lookups answer with an already used slug."""
        real_unique_slug = catalog.unique_slug
        calls = count()

        def lookup(db, model, name, exclude_id=None):
            if next(calls) < times:
                return stale_slug
            return real_unique_slug(db, model, name, exclude_id=exclude_id)

        monkeypatch.setattr(catalog, "unique_slug", lookup)

    def test_create_company_moves_to_next_suffix(
        self, db_session: Session, sample_category, make_company, monkeypatch
    ):
        make_company("Acme Rival", sample_category, slug="acme")
        self.stale_lookup(monkeypatch, "acme")

        company = catalog.create_company(
            db_session, CompanyCreate(name="Acme", category_id=sample_category.id)
        )

        assert company.name == "Acme"
        assert company.slug == "acme-1"
        slugs = db_session.execute(select(Company.slug).order_by(Company.slug)).scalars().all()
        assert slugs == ["acme", "acme-1"]

    def test_rename_moves_to_next_suffix(
        self, db_session: Session, sample_company, make_company, monkeypatch
    ):
        make_company("Globex", slug="globex")
        self.stale_lookup(monkeypatch, "globex")

        company = catalog.update_company(
            db_session,
            sample_company.id,
            CompanyUpdate(name="Globex", url="https://globex.example"),
        )

        assert company.slug == "globex-1"
        assert company.name == "Globex"
        assert company.url == "https://globex.example"

    def test_create_category_moves_to_next_suffix(
        self, db_session: Session, make_category, monkeypatch
    ):
        make_category("Travel Deals", slug="travel")
        self.stale_lookup(monkeypatch, "travel")

        category = catalog.create_category(db_session, CategoryCreate(name="Travel"))

        assert category.slug == "travel-1"

    def test_gives_up_after_max_attempts(
        self, db_session: Session, sample_company, monkeypatch
    ):
        monkeypatch.setattr(catalog.get_settings(), "slug_max_attempts", 3)
        self.stale_lookup(monkeypatch, "acme", times=100)

        with pytest.raises(ConflictError):
            catalog.create_company(
                db_session,
                CompanyCreate(name="Acme", category_id=sample_company.category_id),
            )

        assert db_session.execute(select(Company.slug)).scalars().all() == ["acme"]


class TestCategories:
    def test_create_category(self, db_session: Session):
        category = catalog.create_category(
            db_session, CategoryCreate(name="Food & Drink", description="Eat")
        )

        assert category.slug == "food-drink"
        assert category.description == "Eat"

    def test_duplicate_name(self, db_session: Session, sample_category):
        with pytest.raises(ConflictError):
            catalog.create_category(db_session, CategoryCreate(name="Technology"))

    def test_subcategory_slugs_are_global(self, db_session: Session, make_category):
        first = make_category("First")
        second = make_category("Second")

        a = catalog.create_subcategory(db_session, SubcategoryCreate(name="Other", category_id=first.id))
        b = catalog.create_subcategory(db_session, SubcategoryCreate(name="Other", category_id=second.id))

        assert (a.slug, b.slug) == ("other", "other-1")

    def test_subcategory_needs_a_category(self, db_session: Session):
        with pytest.raises(NotFoundError):
            catalog.create_subcategory(db_session, SubcategoryCreate(name="Lost", category_id=999))

    def test_move_subcategory(
        self, db_session: Session, sample_subcategory, sample_company, make_category
    ):
        target = make_category("Travel")

        moved = catalog.move_subcategory(db_session, sample_subcategory.id, target.id)

        assert moved.category_id == target.id
        db_session.refresh(sample_company)
        # Companies keep their own category
        assert sample_company.subcategory_id == sample_subcategory.id
        assert sample_company.category_id != target.id

    def test_general_is_idempotent(self, db_session: Session):
        first = catalog.get_or_create_general(db_session)
        second = catalog.get_or_create_general(db_session)

        assert first[0].id == second[0].id
        assert first[1].id == second[1].id
        assert first[1].category_id == first[0].id
        assert first[0].name == first[1].name == "General"


class TestCompanyPlacement:
    def test_no_placement_files_under_general(self, db_session: Session):
        company = catalog.create_company(db_session, CompanyCreate(name="Misc Goods"))

        assert company.category.name == "General"
        assert company.subcategory.name == "General"
        assert company.slug == "misc-goods"

    def test_subcategory_only_takes_its_category(
        self, db_session: Session, sample_subcategory
    ):
        company = catalog.create_company(
            db_session,
            CompanyCreate(name="Bytewise", subcategory_id=sample_subcategory.id),
        )

        assert company.category_id == sample_subcategory.category_id

    def test_mismatched_placement(
        self, db_session: Session, sample_subcategory, make_category
    ):
        other = make_category("Travel")

        with pytest.raises(ValidationError):
            catalog.create_company(
                db_session,
                CompanyCreate(
                    name="Confused",
                    category_id=other.id,
                    subcategory_id=sample_subcategory.id,
                ),
            )

    def test_unknown_category(self, db_session: Session):
        with pytest.raises(NotFoundError):
            catalog.create_company(db_session, CompanyCreate(name="Lost", category_id=999))

    def test_duplicate_names_get_distinct_slugs(self, db_session: Session, sample_category):
        first = catalog.create_company(
            db_session, CompanyCreate(name="Acme", category_id=sample_category.id)
        )
        second = catalog.create_company(
            db_session, CompanyCreate(name="Acme", category_id=sample_category.id)
        )

        assert (first.slug, second.slug) == ("acme", "acme-1")

    def test_rename_regenerates_slug(self, db_session: Session, sample_company):
        company = catalog.update_company(
            db_session, sample_company.id, CompanyUpdate(name="Acme Renamed")
        )

        assert company.name == "Acme Renamed"
        assert company.slug == "acme-renamed"

    def test_update_keeps_unset_fields(self, db_session: Session, sample_company):
        company = catalog.update_company(
            db_session, sample_company.id, CompanyUpdate(url="https://acme.example")
        )

        assert company.url == "https://acme.example"
        assert company.slug == "acme"
        assert company.subcategory_id is not None


class TestCascadeDeletes:
    def test_delete_company_orphans_reviews(
        self, db_session: Session, sample_company, sample_review
    ):
        catalog.delete_company(db_session, sample_company.id)
        db_session.expire_all()

        review = db_session.get(Review, sample_review.id)
        assert review is not None
        assert review.company_id is None

    def test_delete_subcategory_removes_its_companies(
        self, db_session: Session, sample_subcategory, sample_company, make_company, sample_category
    ):
        unfiled = make_company("Unfiled", sample_category)
        subcategory_id, company_id, unfiled_id = (
            sample_subcategory.id,
            sample_company.id,
            unfiled.id,
        )

        catalog.delete_subcategory(db_session, subcategory_id)
        db_session.expunge_all()

        assert db_session.get(Subcategory, subcategory_id) is None
        assert db_session.get(Company, company_id) is None
        assert db_session.get(Company, unfiled_id) is not None

    def test_delete_category_cascades(
        self,
        db_session: Session,
        sample_category,
        sample_subcategory,
        sample_company,
        sample_review,
        make_category,
        make_company,
    ):
        # A company filed under the subcategory but pointing at another category
        elsewhere = make_category("Elsewhere")
        stray = make_company("Stray", elsewhere, sample_subcategory)
        survivor = make_company("Survivor", elsewhere)
        category_id = sample_category.id
        subcategory_id = sample_subcategory.id
        deleted_company_ids = [sample_company.id, stray.id]
        survivor_id = survivor.id
        review_id = sample_review.id

        catalog.delete_category(db_session, category_id)
        db_session.expunge_all()

        assert db_session.get(Category, category_id) is None
        assert db_session.get(Subcategory, subcategory_id) is None
        for company_id in deleted_company_ids:
            assert db_session.get(Company, company_id) is None
        assert db_session.get(Company, survivor_id) is not None

        orphan = db_session.get(Review, review_id)
        assert orphan is not None
        assert orphan.company_id is None

    def test_delete_unknown_category(self, db_session: Session):
        with pytest.raises(NotFoundError):
            catalog.delete_category(db_session, 999)

    def test_orphans_leave_user_listing(
        self, db_session: Session, sample_company, sample_review, sample_user
    ):
        from reviewhub.services.reviews import reviews_by_user

        catalog.delete_company(db_session, sample_company.id)
        db_session.expire_all()

        assert reviews_by_user(db_session, sample_user.id) == []
        assert db_session.execute(select(Review.id)).scalars().all() == [sample_review.id]
