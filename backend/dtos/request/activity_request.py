"""
Activity Request DTOs
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class ActivityCreateRequest(BaseModel):
    """Request DTO for logging a client activity event."""

    user_id: Optional[str] = Field(None, alias="userId", description="Set for logged-in users")
    event_type: str = Field(alias="eventType", min_length=1, description="e.g. PAGE_VISIT, LOGIN")
    details: Dict[str, Any] = Field(default_factory=dict, description="Free-form event details")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "userId": "test-user-123",
                "eventType": "PAGE_VISIT",
                "details": {"page": "/homepage"}
            }
        }
