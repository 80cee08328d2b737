"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- auth.py: /api/v1/auth/* endpoints (registration, login, profile)
- categories.py: /api/v1/categories/* endpoints
- subcategories.py: /api/v1/subcategories/* endpoints
- companies.py: /api/v1/companies/* endpoints (incl. homepage ranking)
- reviews.py: /api/v1/reviews/* endpoints (incl. feeds and stats)

Each router is imported and registered in main.py.
"""

from reviewhub.routers.auth import router as auth_router
from reviewhub.routers.categories import router as categories_router
from reviewhub.routers.companies import router as companies_router
from reviewhub.routers.reviews import router as reviews_router
from reviewhub.routers.subcategories import router as subcategories_router

__all__ = [
    "auth_router",
    "categories_router",
    "subcategories_router",
    "companies_router",
    "reviews_router",
]
