"""
Authentication Router

Handles account endpoints:
- Registration (name/email/password -> account + bearer token)
- Login (email/password -> bearer token)
- Get / update the current user's profile

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Bearer tokens carry the user id and are valid for 30 days by default
"""

import logging

from fastapi import APIRouter, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reviewhub.config import get_settings
from reviewhub.dependencies import ActiveUser, DbSession
from reviewhub.exceptions import AuthError, ConflictError, ForbiddenError
from reviewhub.models.user import DEFAULT_PROFILE_IMAGE, User
from reviewhub.schemas.user import (
    AuthResponse,
    LoginRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from reviewhub.services.rate_limiter import limiter
from reviewhub.services.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        409: {"description": "Conflict (email already registered)"},
    },
)

EMAIL_TAKEN_MESSAGE = "Email already registered"


def auth_response(user: User) -> AuthResponse:
    """Account data plus a fresh bearer token."""
    token = create_access_token({"sub": str(user.id)})
    return AuthResponse(
        **UserResponse.model_validate(user).model_dump(),
        access_token=token,
        token_type="bearer",
        expires_in=settings.access_token_expire_days * 24 * 60 * 60,
    )


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.execute(stmt).first() is not None


# -------------------------------------------------------------------------
# Registration Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new account and receive a bearer token.

    **Password Requirements:**
    - Minimum 8 characters
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 number
    """,
)
@limiter.limit("5/minute")
def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> AuthResponse:
    """
    Register a new user with email and password.

    1. Validates name, email and password (handled by Pydantic)
    2. Checks for a duplicate email
    3. Hashes password with bcrypt
    4. Creates user record and returns it with a token
    """
    if _email_taken(db, user_data.email):
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        profile_image=user_data.profile_image or DEFAULT_PROFILE_IMAGE,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE) from e
    db.refresh(user)

    logger.info(f"New user registered: {user.email}")

    return auth_response(user)


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive a bearer token.

    Include the token in the Authorization header:
    ```
    Authorization: Bearer <access_token>
    ```
    """,
)
@limiter.limit("10/minute")
def login(
    request: Request,
    credentials: LoginRequest,
    db: DbSession,
) -> AuthResponse:
    """Authenticate a user and return a bearer token."""
    user = db.execute(
        select(User).where(User.email == credentials.email)
    ).scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Login failed for {credentials.email}")
        raise AuthError("Invalid email or password")

    if not user.is_active:
        logger.warning(f"Login failed: inactive account {credentials.email}")
        raise ForbiddenError("Account is inactive")

    logger.info(f"User logged in: {user.email}")

    return auth_response(user)


# -------------------------------------------------------------------------
# Current User Endpoints
# -------------------------------------------------------------------------
@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the profile of the authenticated user.",
)
@limiter.limit(settings.rate_limit_default)
def get_me(
    request: Request,
    current_user: ActiveUser,
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put(
    "/me",
    response_model=AuthResponse,
    summary="Update current user",
    description="Update name, email, profile image and/or password. Returns a refreshed token.",
)
@limiter.limit(settings.rate_limit_write)
def update_me(
    request: Request,
    user_data: UserUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> AuthResponse:
    """
    Partially update the authenticated user's profile.

    Raises:
        ConflictError: 409 if the new email belongs to another account
    """
    changes = {
        field: value
        for field, value in user_data.model_dump(exclude_unset=True).items()
        if value is not None
    }

    if "email" in changes and _email_taken(db, changes["email"], exclude_id=current_user.id):
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    for field in ("name", "email", "profile_image"):
        if field in changes:
            setattr(current_user, field, changes[field])

    if "password" in changes:
        current_user.hashed_password = hash_password(changes["password"])

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE) from e
    db.refresh(current_user)

    logger.info(f"User {current_user.id} updated profile: {sorted(changes)}")

    return auth_response(current_user)
