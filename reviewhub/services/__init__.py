"""
Services Package

Business logic kept apart from HTTP handling so it can be called from
routers, scripts and tests alike. Services raise reviewhub.exceptions
errors; the application maps them to HTTP responses.

Current services:
- ratings.py: Per-company rating aggregation (average, count, distribution)
- ranking.py: "Best companies by category" for the homepage
- sampler.py: Curated, tier-balanced review sample for company pages
- feeds.py: Mixed browse, category listing and latest-review feeds
- reviews.py: Review create/update/delete with ownership rules
- catalog.py: Categories, subcategories, companies, slugs and cascade deletes
- security.py: Password hashing and bearer tokens
- cache.py: Optional Redis cache for rating stats
- rate_limiter.py: Rate limiting with slowapi
"""
