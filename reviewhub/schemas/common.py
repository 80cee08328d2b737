"""
Shared Pydantic Schemas

Small response shapes used by several routers.
"""

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """Plain confirmation message, e.g. after a delete."""

    message: str = Field(..., examples=["Company deleted successfully"])


class PageInfoResponse(BaseModel):
    """
    Pagination block of the paginated feeds.

    total_pages is ceil(total_items / limit), 0 when there is nothing to show.
    """

    current_page: int = Field(..., ge=1, description="Requested page (1-indexed)")
    total_pages: int = Field(..., ge=0, description="Number of pages")
    total_items: int = Field(..., ge=0, description="Number of items across all pages")
    has_next_page: bool = Field(..., description="current_page < total_pages")
    has_prev_page: bool = Field(..., description="current_page > 1")
    limit: int = Field(..., ge=1, description="Page size")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "current_page": 2,
                "total_pages": 5,
                "total_items": 97,
                "has_next_page": True,
                "has_prev_page": True,
                "limit": 20,
            }
        },
    )
