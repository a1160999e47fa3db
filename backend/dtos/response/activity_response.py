"""
Activity Response DTOs
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional


class ActivityResponse(BaseModel):
    id: str
    user_id: Optional[str] = Field(None, alias="userId")
    event_type: str = Field(alias="eventType")
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        from_attributes = True


class ActivityStatsResponse(BaseModel):
    """Aggregated activity counts."""

    total: int = Field(description="Total number of logged events")
    by_event_type: Dict[str, int] = Field(alias="byEventType", description="Count per event type")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
