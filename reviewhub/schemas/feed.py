"""
Feed Pydantic Schemas

Response shapes of the discovery feeds:
- BestByCategoryResponse: homepage ranking (random categories, top companies)
- CategoryCompaniesResponse: paginated category listing with rating stats
- MixedReviewPageResponse: randomized review browse
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from reviewhub.schemas.category import CategoryMinimal
from reviewhub.schemas.common import PageInfoResponse
from reviewhub.schemas.company import CompanyWithStats
from reviewhub.schemas.review import ReviewResponse
from reviewhub.schemas.user import UserPublicResponse


# =============================================================================
# Best Companies by Category
# =============================================================================


class BestReviewResponse(BaseModel):
    """Highest rated (then newest) review of a ranked company."""

    id: int
    rating: int
    title: str
    comment: str
    created_at: datetime
    user: UserPublicResponse

    model_config = ConfigDict(from_attributes=True)


class RankedCompanyCompany(BaseModel):
    id: int
    name: str
    slug: str
    logo: str = Field(validation_alias=AliasChoices("display_logo", "logo"))

    model_config = ConfigDict(from_attributes=True)


class RankedCompanyResponse(BaseModel):
    """One ranked company; rank is 1-based within its category."""

    rank: int = Field(..., ge=1)
    company: RankedCompanyCompany
    avg_rating: float = Field(..., ge=0, le=5)
    review_count: int = Field(..., ge=1)
    best_review: BestReviewResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class CategoryRankingResponse(BaseModel):
    category: CategoryMinimal
    companies: list[RankedCompanyResponse]

    model_config = ConfigDict(from_attributes=True)


class BestByCategoryResponse(BaseModel):
    """
    Homepage ranking.

    Up to 6 randomly drawn categories; categories come back in draw order.
    """

    categories: list[CategoryRankingResponse]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "categories": [
                    {
                        "category": {"id": 1, "name": "Technology", "slug": "technology"},
                        "companies": [
                            {
                                "rank": 1,
                                "company": {
                                    "id": 7,
                                    "name": "Acme Corp",
                                    "slug": "acme-corp",
                                    "logo": "https://via.placeholder.com/150?text=Company+Logo",
                                },
                                "avg_rating": 4.4,
                                "review_count": 5,
                                "best_review": None,
                            }
                        ],
                    }
                ]
            }
        },
    )


# =============================================================================
# Category Companies
# =============================================================================


class CategoryCompaniesResponse(BaseModel):
    companies: list[CompanyWithStats]
    pagination: PageInfoResponse
    category: CategoryMinimal


# =============================================================================
# Mixed Browse
# =============================================================================


class MixedReviewPageResponse(BaseModel):
    """
    One page of the shuffled review feed.

    The order is re-drawn on every request, so consecutive pages may
    overlap or skip reviews.
    """

    reviews: list[ReviewResponse]
    pagination: PageInfoResponse

    model_config = ConfigDict(from_attributes=True)
