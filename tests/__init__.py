"""
Test Suite for ReviewHub API

Test Organization:
- conftest.py: Shared fixtures (test database, client, catalog and review factories)
- test_ratings.py, test_ranking.py, test_sampler.py, test_feeds.py: aggregation and feeds
- test_reviews.py: Review lifecycle under /api/v1/reviews
- test_catalog.py, test_categories.py, test_companies.py: catalog service and endpoints
- test_auth.py: Registration, login and profile
- test_cache.py: Optional Redis stats cache (mocked)
- test_main.py: Health check and error format

Running Tests:
    # Run all tests
    pytest

    # Run specific file
    pytest tests/test_sampler.py

    # Run with verbose output
    pytest -v
"""
