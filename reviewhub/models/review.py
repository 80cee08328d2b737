"""
Review Model

Represents a user's review of a company: a 1-5 star rating plus text.

Business Rules:
- One review per user per company (unique constraint)
- Rating must be an integer 1-5
- Comment is required, 10-1000 characters after trimming
- Title is optional (max 100), defaults to "Review"
- Only the author can edit/delete a review
- Deleting a company leaves its reviews in place with company_id NULL;
  read paths skip such orphans
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewhub.database import Base

if TYPE_CHECKING:
    from reviewhub.models.company import Company
    from reviewhub.models.user import User

DEFAULT_REVIEW_TITLE = "Review"
RATING_MIN = 1
RATING_MAX = 5
COMMENT_MIN_LENGTH = 10
COMMENT_MAX_LENGTH = 1000
TITLE_MAX_LENGTH = 100


class Review(Base):
    """
    Review model for company reviews.

    Attributes:
        id: Primary key
        company_id: Foreign key to companies table (NULL once orphaned)
        user_id: Foreign key to users table
        rating: 1-5 star rating
        title: Short headline
        comment: Review text content
        is_verified: Reserved for verified-customer badges
        helpful_votes: Reserved moderation counter
        report_count: Reserved moderation counter
        created_at: When the review was created
        updated_at: When the review was last updated
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Rating from 1-5 stars",
    )
    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        default=DEFAULT_REVIEW_TITLE,
        nullable=False,
    )
    comment: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Review text content",
    )

    # Reserved fields, not computed by the aggregation core
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    helpful_votes: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    report_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    company: Mapped["Company | None"] = relationship(
        "Company",
        back_populates="reviews",
    )
    user: Mapped["User"] = relationship(
        "User",
        back_populates="reviews",
    )

    __table_args__ = (
        # One review per user per company
        UniqueConstraint("company_id", "user_id", name="uq_review_company_user"),
        CheckConstraint(
            f"rating >= {RATING_MIN} AND rating <= {RATING_MAX}",
            name="ck_review_rating_range",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id}, company_id={self.company_id}, "
            f"user_id={self.user_id}, rating={self.rating})>"
        )
