"""
Company Pydantic Schemas

Schemas:
- CompanyCreate: Create a company (slug is derived from the name)
- CompanyUpdate: Partial update, slug follows a name change
- CompanyMinimal: Embedded in review responses
- CompanyResponse: Full company with its category and subcategory
- CompanyWithStats: CompanyResponse plus derived rating stats
- CompanyWithRatingsResponse: Company page payload with the rating breakdown

Logos fall back to a placeholder URL in every response.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from reviewhub.schemas.category import CategoryMinimal, SubcategoryMinimal


# =============================================================================
# Request Schemas
# =============================================================================


class CompanyCreate(BaseModel):
    """
    Schema for creating a company.

    Without category_id and subcategory_id the company is filed under
    General / General. With only subcategory_id, the category is the
    subcategory's parent.

    Example request body:
    {
        "name": "Acme Corp",
        "url": "https://acme.example",
        "category_id": 1,
        "subcategory_id": 3
    }
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Company name",
        examples=["Acme Corp"],
    )
    url: str | None = Field(default=None, max_length=500)
    logo: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    category_id: int | None = Field(default=None, ge=1)
    subcategory_id: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(str_strip_whitespace=True)


class CompanyUpdate(BaseModel):
    """
    Schema for updating a company.

    All fields are optional; omitted or null fields keep their value.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    url: str | None = Field(default=None, max_length=500)
    logo: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    category_id: int | None = Field(default=None, ge=1)
    subcategory_id: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(str_strip_whitespace=True)


# =============================================================================
# Response Schemas
# =============================================================================


class CompanyMinimal(BaseModel):
    """Company info embedded in review responses."""

    id: int
    name: str
    slug: str
    logo: str = Field(validation_alias=AliasChoices("display_logo", "logo"))
    category: CategoryMinimal | None = None

    model_config = ConfigDict(from_attributes=True)


class CompanyResponse(BaseModel):
    id: int = Field(..., description="Unique company identifier")
    name: str = Field(..., description="Company name")
    slug: str = Field(..., description="URL identifier, unique across companies")
    url: str | None = Field(default=None, description="Company website")
    description: str | None = Field(default=None)
    logo: str = Field(
        ...,
        validation_alias=AliasChoices("display_logo", "logo"),
        description="Logo URL, placeholder when none was set",
    )
    category_id: int | None = None
    subcategory_id: int | None = None
    category: CategoryMinimal | None = None
    subcategory: SubcategoryMinimal | None = None
    created_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 7,
                "name": "Acme Corp",
                "slug": "acme-corp",
                "url": "https://acme.example",
                "description": None,
                "logo": "https://via.placeholder.com/150?text=Company+Logo",
                "category_id": 1,
                "subcategory_id": 3,
                "category": {"id": 1, "name": "Technology", "slug": "technology"},
                "subcategory": {
                    "id": 3,
                    "name": "Software",
                    "slug": "software",
                    "category_id": 1,
                },
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class CompanyWithStats(CompanyResponse):
    """Company listing entry with its derived rating stats."""

    avg_rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)


class CompanyWithRatingsResponse(BaseModel):
    """Company page header: the company and its rating statistics."""

    company: CompanyResponse
    avg_rating: float = Field(..., ge=0, le=5, description="Average rounded to 1 decimal")
    review_count: int = Field(..., ge=0)
    rating_breakdown: dict[int, int] = Field(
        ...,
        description="Review count per star, every star 1-5 present",
    )
