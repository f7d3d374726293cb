"""Activity feed and notification inbox endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from greda_gbc.deps import get_current_user, get_recorder
from greda_gbc.schemas.activity import ActivityLogResponse, NotificationResponse, UnreadCountResponse
from greda_gbc.services.activity import ActivityRecorder

router = APIRouter(tags=["activity"])


@router.get("/activity", response_model=list[ActivityLogResponse])
async def list_activity(
    limit: int = Query(default=50, ge=1, le=500),
    user: dict[str, Any] = Depends(get_current_user),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> list[ActivityLogResponse]:
    """The caller's activity feed, newest first."""
    return [ActivityLogResponse(**entry) for entry in recorder.list_activity(user["id"], limit=limit)]


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    user: dict[str, Any] = Depends(get_current_user),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> list[NotificationResponse]:
    notifications = recorder.list_notifications(user["id"], unread_only=unread_only)
    return [NotificationResponse(**n) for n in notifications]


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: dict[str, Any] = Depends(get_current_user),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=recorder.unread_count(user["id"]))


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    user: dict[str, Any] = Depends(get_current_user),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> NotificationResponse:
    """Mark one of the caller's notifications as read."""
    return NotificationResponse(**recorder.mark_read(notification_id, user["id"]))
