"""
Category and Subcategory Models

Companies are browsed through a two-level taxonomy:

    Category ("Technology")
      └── Subcategory ("Software", "Hardware", ...)
            └── Company

A Subcategory always references exactly one Category. Subcategory names are
not unique (every category may have its own "General"), but every slug is.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewhub.database import Base

if TYPE_CHECKING:
    from reviewhub.models.company import Company


class Category(Base):
    """
    Top-level grouping of companies.

    Table: categories

    Indexes:
    - name: Unique
    - slug: Unique, used in public URLs (/categories/{slug}/...)
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
        comment="Category name (e.g., 'Technology', 'Travel')"
    )

    slug: Mapped[str] = mapped_column(
        String(120),
        unique=True,
        index=True,
        nullable=False,
        comment="URL-friendly identifier derived from the name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
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

    # Deletion of subcategories and companies is done explicitly by the
    # catalog service, step by step, so no ORM cascade here.
    subcategories: Mapped[List["Subcategory"]] = relationship(
        "Subcategory",
        back_populates="category",
        passive_deletes=True,
        order_by="Subcategory.name",
    )

    companies: Mapped[List["Company"]] = relationship(
        "Company",
        back_populates="category",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"Category(id={self.id}, name='{self.name}', slug='{self.slug}')"


class Subcategory(Base):
    """
    Second-level grouping of companies within a category.

    Table: subcategories
    """

    __tablename__ = "subcategories"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
        comment="Subcategory name, not unique across categories"
    )

    slug: Mapped[str] = mapped_column(
        String(120),
        unique=True,
        index=True,
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
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

    category: Mapped["Category"] = relationship(
        "Category",
        back_populates="subcategories",
    )

    companies: Mapped[List["Company"]] = relationship(
        "Company",
        back_populates="subcategory",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return (
            f"Subcategory(id={self.id}, name='{self.name}', "
            f"category_id={self.category_id})"
        )
