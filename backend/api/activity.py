"""
Activity API - client activity logging and simple statistics
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from constants import HTTPStatus
from dependencies import get_activity_repository
from dtos.request.activity_request import ActivityCreateRequest
from dtos.response.activity_response import ActivityResponse, ActivityStatsResponse
from repositories.activity_repository import ActivityRepository
from utils.error_handlers import handle_api_errors

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ActivityResponse, status_code=HTTPStatus.CREATED)
@handle_api_errors("Log activity")
def log_activity(payload: ActivityCreateRequest, repo: ActivityRepository = Depends(get_activity_repository)):
    """Record one activity event (page visit, click, login, ...)"""
    activity = repo.log_event(payload.event_type, user_id=payload.user_id, details=payload.details)
    return ActivityResponse.model_validate(activity)


@router.get("", response_model=List[ActivityResponse])
@handle_api_errors("Get activities")
def get_activities(
    limit: int = Query(100, ge=1, le=1000),
    event_type: Optional[str] = Query(None, alias="eventType"),
    repo: ActivityRepository = Depends(get_activity_repository),
):
    """
    Get recent activity events, newest first

    Query parameters:
    - limit: Maximum number of events (1-1000)
    - eventType: Only events of this type
    """
    return [ActivityResponse.model_validate(a) for a in repo.get_recent(limit=limit, event_type=event_type)]


@router.get("/stats", response_model=ActivityStatsResponse)
@handle_api_errors("Get activity stats")
def get_activity_stats(repo: ActivityRepository = Depends(get_activity_repository)):
    """Count logged events in total and per event type"""
    by_type = repo.count_by_event_type()
    return ActivityStatsResponse(total=sum(by_type.values()), by_event_type=by_type)
