"""
Review Pydantic Schemas

Schemas for company reviews with ratings.

Schemas:
- ReviewCreate: Create a new review
- ReviewUpdate: Update an existing review
- ReviewResponse: Full review data for API responses
- RatingStatsResponse: Aggregated rating statistics for a company

Business Rules:
- Rating must be a whole number 1-5 (validated at schema level)
- Comment is 10-1000 characters after trimming
- Title is at most 100 characters, a blank title becomes "Review"
- One review per user per company (enforced at database level)
- Users can only edit/delete their own reviews
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reviewhub.models.review import (
    COMMENT_MAX_LENGTH,
    COMMENT_MIN_LENGTH,
    DEFAULT_REVIEW_TITLE,
    RATING_MAX,
    RATING_MIN,
    TITLE_MAX_LENGTH,
)
from reviewhub.schemas.company import CompanyMinimal
from reviewhub.schemas.user import UserPublicResponse


# =============================================================================
# Request Schemas
# =============================================================================


class ReviewCreate(BaseModel):
    """
    Schema for creating a new review.

    Example request body:
    {
        "company_id": 7,
        "rating": 5,
        "title": "Great support",
        "comment": "They fixed my issue within the hour."
    }
    """

    company_id: int = Field(..., ge=1, description="ID of the reviewed company")

    rating: int = Field(
        ...,
        strict=True,
        ge=RATING_MIN,
        le=RATING_MAX,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    title: str = Field(
        default=DEFAULT_REVIEW_TITLE,
        max_length=TITLE_MAX_LENGTH,
        description="Optional headline, defaults to 'Review'",
        examples=["Great support"],
    )

    comment: str = Field(
        ...,
        min_length=COMMENT_MIN_LENGTH,
        max_length=COMMENT_MAX_LENGTH,
        description="Review text (10-1000 characters)",
        examples=["They fixed my issue within the hour."],
    )

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("title", mode="before")
    @classmethod
    def default_blank_title(cls, v):
        """A missing or blank title falls back to the default."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_REVIEW_TITLE
        return v


class ReviewUpdate(BaseModel):
    """
    Schema for updating an existing review.

    All fields are optional; only provided fields change.
    """

    rating: int | None = Field(
        default=None,
        strict=True,
        ge=RATING_MIN,
        le=RATING_MAX,
    )
    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    comment: str | None = Field(
        default=None,
        min_length=COMMENT_MIN_LENGTH,
        max_length=COMMENT_MAX_LENGTH,
    )

    model_config = ConfigDict(str_strip_whitespace=True)


# =============================================================================
# Response Schemas
# =============================================================================


class ReviewResponse(BaseModel):
    """
    Schema for review responses.

    company is null for a review whose company was deleted.
    """

    id: int = Field(..., description="Unique review identifier")
    company_id: int | None = Field(default=None, description="ID of the reviewed company")
    user_id: int = Field(..., description="ID of the author")
    rating: int = Field(..., ge=RATING_MIN, le=RATING_MAX)
    title: str
    comment: str
    is_verified: bool = False
    helpful_votes: int = 0
    created_at: datetime
    updated_at: datetime

    user: UserPublicResponse = Field(..., description="Author of the review")
    company: CompanyMinimal | None = Field(default=None, description="Reviewed company")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "company_id": 7,
                "user_id": 3,
                "rating": 5,
                "title": "Great support",
                "comment": "They fixed my issue within the hour.",
                "is_verified": False,
                "helpful_votes": 0,
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "user": {
                    "id": 3,
                    "name": "Jane Doe",
                    "profile_image": "https://via.placeholder.com/100?text=User",
                },
                "company": {
                    "id": 7,
                    "name": "Acme Corp",
                    "slug": "acme-corp",
                    "logo": "https://via.placeholder.com/150?text=Company+Logo",
                    "category": {"id": 1, "name": "Technology", "slug": "technology"},
                },
            }
        },
    )


# =============================================================================
# Aggregation Schemas
# =============================================================================


class RatingStatsResponse(BaseModel):
    """
    Aggregated rating statistics for a company.

    Derived on every request, never stored.
    """

    company_id: int = Field(..., description="Company ID")
    avg_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Average rating rounded half-up to 1 decimal (0 means no reviews)",
    )
    review_count: int = Field(..., ge=0, description="Total number of reviews")
    distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of each rating (1-5)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "company_id": 7,
                "avg_rating": 4.4,
                "review_count": 5,
                "distribution": {"1": 0, "2": 0, "3": 1, "4": 1, "5": 3},
            }
        },
    )
