"""
pytest Fixtures for ReviewHub API Tests

This file contains shared fixtures used across all test files.

FIXTURE SCOPES:
- session scope for the engine (expensive to create)
- function scope for sessions (isolation between tests)

Every test runs inside a transaction on a single in-memory SQLite
connection that is rolled back afterwards, so tests never see each
other's data.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting, the stats cache and sets a test secret key
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STATS_CACHE_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"

import random
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reviewhub.database import Base, get_db
from reviewhub.dependencies import get_rng
from reviewhub.main import app
from reviewhub.models import Category, Company, Review, Subcategory, User
from reviewhub.services.security import create_access_token, hash_password

TEST_PASSWORD = "SecurePass123"
TEST_SEED = 1234

# Hashed once; bcrypt is deliberately slow
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

# Fixed reference time so "newest first" orderings are deterministic
BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def engine():
    """
    SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, the in-memory database would disappear between connections.
    Foreign keys are switched on by the connect listener in
    reviewhub.database, so ON DELETE SET NULL behaves as on PostgreSQL.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Test client bound to the test session.

    get_db is overridden to use the test session and get_rng to return a
    seeded generator, so the shuffled feeds are repeatable.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rng] = lambda: random.Random(TEST_SEED)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# USER FIXTURES
# =============================================================================


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory for users with unique emails."""
    sequence = count(1)

    def _make_user(name: str | None = None, email: str | None = None) -> User:
        n = next(sequence)
        user = User(
            name=name or f"Reviewer {n}",
            email=email or f"reviewer{n}@example.com",
            hashed_password=TEST_PASSWORD_HASH,
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def sample_user(make_user) -> User:
    return make_user(name="Test User", email="testuser@example.com")


@pytest.fixture
def second_user(make_user) -> User:
    """A second account, for ownership scenarios."""
    return make_user(name="Second User", email="seconduser@example.com")


def bearer(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(sample_user: User) -> dict:
    """Authorization header for sample_user."""
    return bearer(sample_user)


@pytest.fixture
def second_auth_headers(second_user: User) -> dict:
    return bearer(second_user)


# =============================================================================
# CATALOG FIXTURES
# =============================================================================


@pytest.fixture
def make_category(db_session: Session) -> Callable[..., Category]:
    def _make_category(name: str, slug: str | None = None) -> Category:
        category = Category(name=name, slug=slug or name.lower().replace(" ", "-"))
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category

    return _make_category


@pytest.fixture
def make_subcategory(db_session: Session) -> Callable[..., Subcategory]:
    def _make_subcategory(name: str, category: Category, slug: str | None = None) -> Subcategory:
        subcategory = Subcategory(
            name=name,
            slug=slug or f"{category.slug}-{name.lower().replace(' ', '-')}",
            category_id=category.id,
        )
        db_session.add(subcategory)
        db_session.commit()
        db_session.refresh(subcategory)
        return subcategory

    return _make_subcategory


@pytest.fixture
def make_company(db_session: Session) -> Callable[..., Company]:
    def _make_company(
        name: str,
        category: Category | None = None,
        subcategory: Subcategory | None = None,
        slug: str | None = None,
        logo: str = "",
    ) -> Company:
        company = Company(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            logo=logo,
            category_id=category.id if category else None,
            subcategory_id=subcategory.id if subcategory else None,
        )
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return _make_company


@pytest.fixture
def sample_category(make_category) -> Category:
    return make_category("Technology")


@pytest.fixture
def sample_subcategory(make_subcategory, sample_category: Category) -> Subcategory:
    return make_subcategory("Software", sample_category, slug="software")


@pytest.fixture
def sample_company(
    make_company,
    sample_category: Category,
    sample_subcategory: Subcategory,
) -> Company:
    return make_company("Acme", sample_category, sample_subcategory)


# =============================================================================
# REVIEW FIXTURES
# =============================================================================


@pytest.fixture
def make_review(db_session: Session, make_user) -> Callable[..., Review]:
    """
    Factory for reviews.

    Each call without an explicit user creates a fresh reviewer, so the
    one-review-per-user-per-company rule never gets in the way. Reviews
    get strictly increasing created_at values in call order unless one
    is passed.
    """
    sequence = count(0)

    def _make_review(
        company: Company,
        rating: int,
        user: User | None = None,
        title: str = "Review",
        comment: str = "A perfectly reasonable review text.",
        created_at: datetime | None = None,
    ) -> Review:
        n = next(sequence)
        review = Review(
            company_id=company.id,
            user_id=(user or make_user()).id,
            rating=rating,
            title=title,
            comment=comment,
            created_at=created_at or BASE_TIME + timedelta(minutes=n),
        )
        db_session.add(review)
        db_session.commit()
        db_session.refresh(review)
        return review

    return _make_review


@pytest.fixture
def sample_review(make_review, sample_company: Company, sample_user: User) -> Review:
    """A 4-star review of sample_company by sample_user."""
    return make_review(
        sample_company,
        4,
        user=sample_user,
        title="Solid service",
        comment="Support answered quickly and fixed my issue.",
    )
