"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
- XxxMinimal: Small embedded representation for nested responses
"""

from reviewhub.schemas.category import (
    CategoryCreate,
    CategoryMinimal,
    CategoryResponse,
    CategoryWithSubcategories,
    SubcategoryCreate,
    SubcategoryMinimal,
    SubcategoryMove,
    SubcategoryResponse,
    SubcategoryWithCategory,
)
from reviewhub.schemas.common import MessageResponse, PageInfoResponse
from reviewhub.schemas.company import (
    CompanyCreate,
    CompanyMinimal,
    CompanyResponse,
    CompanyUpdate,
    CompanyWithRatingsResponse,
    CompanyWithStats,
)
from reviewhub.schemas.feed import (
    BestByCategoryResponse,
    CategoryCompaniesResponse,
    CategoryRankingResponse,
    MixedReviewPageResponse,
    RankedCompanyResponse,
)
from reviewhub.schemas.review import (
    RatingStatsResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from reviewhub.schemas.user import (
    AuthResponse,
    LoginRequest,
    UserCreate,
    UserPublicResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # Shared
    "MessageResponse",
    "PageInfoResponse",
    # Category schemas
    "CategoryCreate",
    "CategoryMinimal",
    "CategoryResponse",
    "CategoryWithSubcategories",
    "SubcategoryCreate",
    "SubcategoryMinimal",
    "SubcategoryMove",
    "SubcategoryResponse",
    "SubcategoryWithCategory",
    # Company schemas
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyMinimal",
    "CompanyResponse",
    "CompanyWithStats",
    "CompanyWithRatingsResponse",
    # Feed schemas
    "BestByCategoryResponse",
    "CategoryRankingResponse",
    "RankedCompanyResponse",
    "CategoryCompaniesResponse",
    "MixedReviewPageResponse",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "RatingStatsResponse",
    # User/Auth schemas
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserPublicResponse",
    "LoginRequest",
    "AuthResponse",
]
