"""
Category Pydantic Schemas

Schemas for the two-level company taxonomy.

Schemas:
- CategoryCreate / SubcategoryCreate: Creation payloads (slug is derived)
- SubcategoryMove: Move a subcategory to another category
- CategoryMinimal / SubcategoryMinimal: Embedded in company and review responses
- CategoryResponse / SubcategoryResponse: Full records
- CategoryWithSubcategories: Category listing with nested subcategories
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Request Schemas
# =============================================================================


class CategoryCreate(BaseModel):
    """
    Schema for creating a category.

    Example request body:
    {
        "name": "Technology",
        "description": "Software, hardware and IT services"
    }
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name (unique)",
        examples=["Technology"],
    )
    description: str | None = Field(default=None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class SubcategoryCreate(BaseModel):
    """Schema for creating a subcategory under an existing category."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Subcategory name",
        examples=["Software"],
    )
    category_id: int = Field(..., ge=1, description="Parent category ID")
    description: str | None = Field(default=None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class SubcategoryMove(BaseModel):
    """Target of a subcategory move."""

    new_category_id: int = Field(..., ge=1, description="ID of the new parent category")


# =============================================================================
# Embedded Schemas
# =============================================================================


class CategoryMinimal(BaseModel):
    """Just enough to link to a category page."""

    id: int
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class SubcategoryMinimal(BaseModel):
    id: int
    name: str
    slug: str
    category_id: int

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Response Schemas
# =============================================================================


class SubcategoryResponse(BaseModel):
    id: int = Field(..., description="Unique subcategory identifier")
    name: str = Field(..., description="Subcategory name")
    slug: str = Field(..., description="URL identifier")
    description: str | None = Field(default=None)
    category_id: int = Field(..., description="Parent category ID")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubcategoryWithCategory(SubcategoryResponse):
    """Subcategory with its parent category embedded."""

    category: CategoryMinimal


class CategoryResponse(BaseModel):
    id: int = Field(..., description="Unique category identifier")
    name: str = Field(..., description="Category name")
    slug: str = Field(..., description="URL identifier")
    description: str | None = Field(default=None)
    created_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Technology",
                "slug": "technology",
                "description": "Software, hardware and IT services",
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class CategoryWithSubcategories(CategoryResponse):
    """Category listing entry; subcategories are ordered by name."""

    subcategories: list[SubcategoryResponse] = Field(default_factory=list)
