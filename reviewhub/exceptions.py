"""
Domain Exceptions

Services raise these instead of HTTPException so the aggregation and
lifecycle logic stays usable outside a request. The application factory
registers a single handler that renders them as JSON:

    {"error": "Review not found"}

Error Taxonomy:
- ValidationError -> 400 (missing/invalid field, out-of-range rating)
- AuthError       -> 401 (missing/invalid credential)
- ForbiddenError  -> 403 (non-owner mutation)
- NotFoundError   -> 404 (missing entity id/slug)
- ConflictError   -> 409 (duplicate review, duplicate unique field)
- ReviewHubError  -> 500 (unclassified)
"""

from fastapi import status


class ReviewHubError(Exception):
    """Base class for all domain errors raised by services."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ReviewHubError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(ReviewHubError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ReviewHubError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ReviewHubError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ReviewHubError):
    status_code = status.HTTP_409_CONFLICT
