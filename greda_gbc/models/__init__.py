"""Database models for GREDA-GBC."""

from greda_gbc.models.base import Base
from greda_gbc.models.user import User, UserInvitation
from greda_gbc.models.assessment import Assessment, AssessmentMedia, AssessmentSection
from greda_gbc.models.activity import ActivityLog, Notification

__all__ = [
    "Base",
    "User",
    "UserInvitation",
    "Assessment",
    "AssessmentSection",
    "AssessmentMedia",
    "ActivityLog",
    "Notification",
]
