"""
Activity repository for the client activity log.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Activity as ActivityModel
from .base_repository import BaseRepository


class ActivityRepository(BaseRepository[ActivityModel]):
    """Repository for Activity model operations."""

    def __init__(self, db: Session):
        super().__init__(db, ActivityModel)

    def log_event(self, event_type: str, user_id: Optional[str] = None,
                  details: Optional[Dict[str, Any]] = None) -> ActivityModel:
        """Store one activity event and commit."""
        activity = ActivityModel(user_id=user_id, event_type=event_type, details=details or {})
        self.create(activity)
        self.commit("log_event")
        return activity

    def get_recent(self, limit: int = 100, event_type: Optional[str] = None) -> List[ActivityModel]:
        """
        Get the most recent events, newest first.

        Args:
            limit: Maximum number of events
            event_type: Optional event type filter
        """
        query = self.db.query(self.model)
        if event_type:
            query = query.filter(self.model.event_type == event_type)
        return query.order_by(self.model.timestamp.desc()).limit(limit).all()

    def count_by_event_type(self) -> Dict[str, int]:
        rows = self.db.query(
            self.model.event_type,
            func.count(self.model.id)
        ).group_by(self.model.event_type).all()
        return {event_type: count for event_type, count in rows}
