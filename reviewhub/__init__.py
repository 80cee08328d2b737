"""
ReviewHub API Application Package

Review-aggregation API: users register, browse companies grouped by
category/subcategory, and post star ratings with text reviews. Rating
statistics and curated review feeds are computed per request from the raw
review store.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain error taxonomy mapped to HTTP status codes
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (aggregation, ranking, sampling, feeds, catalog)
"""

__version__ = "0.1.0"
