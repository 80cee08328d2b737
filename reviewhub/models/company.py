"""
Company Model

The entity that gets reviewed. Every company belongs to one Category and one
Subcategory. Both references are nullable only so that a company can be
created before the "General" fallback pair is resolved, and so that the
cascade delete can proceed step by step.

Rating statistics are NOT stored here; they are always derived from the
reviews table (see reviewhub.services.ratings).
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewhub.database import Base

if TYPE_CHECKING:
    from reviewhub.models.category import Category, Subcategory
    from reviewhub.models.review import Review

DEFAULT_COMPANY_LOGO = "https://via.placeholder.com/150?text=Company+Logo"


class Company(Base):
    """
    Company model.

    Table: companies

    Indexes:
    - slug: Unique, derived from name with a numeric suffix on collision
    - name: For search and name ordering
    - category_id / subcategory_id: For listing by taxonomy

    Example:
        company = Company(
            name="Acme",
            slug="acme",
            url="https://acme.example",
            category_id=tech.id,
            subcategory_id=software.id,
        )
    """

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="Company name"
    )

    slug: Mapped[str] = mapped_column(
        String(280),
        unique=True,
        index=True,
        nullable=False,
        comment="Globally unique URL identifier"
    )

    url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Company website"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    logo: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
        comment="Logo URL, empty when none was uploaded"
    )

    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    subcategory_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("subcategories.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    category: Mapped[Optional["Category"]] = relationship(
        "Category",
        back_populates="companies",
    )

    subcategory: Mapped[Optional["Subcategory"]] = relationship(
        "Subcategory",
        back_populates="companies",
    )

    # Reviews outlive their company (company_id is set to NULL by the
    # database), so the ORM must not try to delete or detach them.
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="company",
        passive_deletes="all",
    )

    @property
    def display_logo(self) -> str:
        """Logo URL with the placeholder applied when none is set."""
        return self.logo or DEFAULT_COMPANY_LOGO

    def __repr__(self) -> str:
        return f"Company(id={self.id}, name='{self.name}', slug='{self.slug}')"
