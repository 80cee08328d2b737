"""
SQLAlchemy Models Package

Model Relationships:
- Category -> Subcategory: One-to-Many
- Category / Subcategory -> Company: One-to-Many
- Company -> Review: One-to-Many (reviews survive company deletion)
- User -> Review: One-to-Many

Import all models here to:
1. Make them available as: from reviewhub.models import Company, Review
2. Ensure Alembic discovers them for migrations
"""

from reviewhub.models.user import User
from reviewhub.models.category import Category, Subcategory
from reviewhub.models.company import Company
from reviewhub.models.review import Review

__all__ = [
    "User",
    "Category",
    "Subcategory",
    "Company",
    "Review",
]
