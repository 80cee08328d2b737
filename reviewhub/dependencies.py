"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Common Dependency Patterns used here:
- Database sessions (per-request)
- Authentication (bearer token -> User)
- Pagination parameters
- Random source for the shuffled feeds (overridable in tests)
"""

import random
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from reviewhub.config import get_settings
from reviewhub.database import get_db
from reviewhub.models.user import User
from reviewhub.services.security import token_user_id

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def list_companies(db: Session = Depends(get_db)):
#
# You can write:
#   def list_companies(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Pagination parameters for the paginated feeds.

    - page: Which page to return (1-indexed)
    - limit: How many items per page

    The default page size differs per feed, so routes build their own
    PaginationParams subclass or pass `limit` explicitly; this base class
    uses the mixed browse default.

    Usage in route:
        @router.get("/reviews/browse-mixed")
        def browse(db: DbSession, pagination: Pagination):
            browse_mixed(db, pagination.page, pagination.limit)
    """

    default_limit: int = settings.browse_default_limit

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        limit: int | None = Query(
            default=None,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[20, 30],
        ),
    ) -> None:
        self.page = page
        self.limit = limit if limit is not None else self.default_limit


class CategoryPaginationParams(PaginationParams):
    """Pagination for the category company listing (30 per page by default)."""

    default_limit: int = settings.category_companies_default_limit


Pagination = Annotated[PaginationParams, Depends()]
CategoryPagination = Annotated[CategoryPaginationParams, Depends()]


# =============================================================================
# Randomness
# =============================================================================
def get_rng() -> random.Random:
    """
    Random source for the ranking draw, the curated sample and the mixed feed.

    A fresh, OS-seeded generator per request. Tests override this dependency
    with a seeded random.Random to get repeatable results.
    """
    return random.Random()


Rng = Annotated[random.Random, Depends(get_rng)]


# =============================================================================
# Bearer Token Authentication
# =============================================================================
# OAuth2PasswordBearer extracts the token from "Authorization: Bearer <token>"
# and returns 401 if the header is missing (when auto_error=True).

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=True,
)


def _user_from_token(db: Session, token: str) -> User | None:
    user_id = token_user_id(token)
    if user_id is None:
        return None
    return db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Extract and validate the current user from the bearer token.

    Raises:
        HTTPException: 401 if the token is invalid or the user no longer exists
    """
    user = _user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        HTTPException: 403 if the account is inactive
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return current_user


ActiveUser = Annotated[User, Depends(get_current_active_user)]
