"""Schemas for activity log and notification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ActivityLogResponse(BaseModel):
    id: int
    user_id: str
    activity_type: str
    title: str
    description: str
    target_user_id: str | None = None
    assessment_public_id: str | None = None
    building_name: str | None = None
    priority: str
    metadata: dict[str, Any]
    created_at: datetime


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    assessment_public_id: str | None = None
    building_name: str | None = None
    client_name: str | None = None
    is_read: bool
    priority: str
    metadata: dict[str, Any]
    created_at: datetime
    read_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    count: int
