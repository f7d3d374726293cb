"""In-memory data store for the GREDA-GBC assessment service.

Provides a simple data store used during development and testing.
In production, this would be backed by PostgreSQL with the schema in
``greda_gbc.models``.
"""

from __future__ import annotations

import itertools
from typing import Any


class DataStore:
    """In-memory data store for development and testing."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.invitations: dict[str, dict[str, Any]] = {}  # token -> invitation
        self.assessments: dict[int, dict[str, Any]] = {}
        self.public_ids: dict[str, int] = {}  # public_id -> internal id
        self.sections: dict[tuple[int, str], dict[str, Any]] = {}  # (assessment_id, section_type) -> section
        self.media: dict[int, list[dict[str, Any]]] = {}  # assessment_id -> list
        self.activity_logs: list[dict[str, Any]] = []
        self.notifications: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def reset(self) -> None:
        """Clear all data. Used by the test suite."""
        self.__init__()

    def next_id(self) -> int:
        """Return a new internal primary key."""
        return next(self._ids)

    # Users

    def add_user(self, user: dict[str, Any]) -> None:
        """Add or update a user."""
        self.users[user["id"]] = user

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        """Case-insensitive email lookup."""
        email = email.lower()
        for user in self.users.values():
            if (user.get("email") or "").lower() == email:
                return user
        return None

    def get_users_by_role(self, role: str) -> list[dict[str, Any]]:
        return [u for u in self.users.values() if u.get("role") == role]

    # Assessments

    def add_assessment(self, assessment: dict[str, Any]) -> None:
        """Add an assessment and index its public identifier."""
        self.assessments[assessment["id"]] = assessment
        self.public_ids[assessment["public_id"]] = assessment["id"]

    def get_assessment_by_public_id(self, public_id: str) -> dict[str, Any] | None:
        internal_id = self.public_ids.get(public_id)
        if internal_id is None:
            return None
        return self.assessments.get(internal_id)

    def list_assessments(self, include_archived: bool = False) -> list[dict[str, Any]]:
        """All assessments, oldest first."""
        return [
            a for a in self.assessments.values()
            if include_archived or not a.get("is_archived")
        ]

    # Sections

    def get_section(self, assessment_id: int, section_type: str) -> dict[str, Any] | None:
        return self.sections.get((assessment_id, section_type))

    def upsert_section(self, section: dict[str, Any]) -> dict[str, Any]:
        """Insert or replace the section for (assessment_id, section_type)."""
        key = (section["assessment_id"], section["section_type"])
        self.sections[key] = section
        return section

    def get_sections(self, assessment_id: int) -> list[dict[str, Any]]:
        """Sections for an assessment."""
        return [s for (a_id, _), s in self.sections.items() if a_id == assessment_id]

    # Media

    def add_media(self, assessment_id: int, media: dict[str, Any]) -> None:
        self.media.setdefault(assessment_id, []).append(media)

    def get_media(self, assessment_id: int) -> list[dict[str, Any]]:
        return self.media.get(assessment_id, [])

    # Activity and notifications

    def add_activity_log(self, entry: dict[str, Any]) -> None:
        self.activity_logs.append(entry)

    def get_activity_logs(self, user_id: str | None = None) -> list[dict[str, Any]]:
        """Activity entries, optionally for a single user's perspective."""
        if user_id is None:
            return list(self.activity_logs)
        return [e for e in self.activity_logs if e["user_id"] == user_id]

    def add_notification(self, notification: dict[str, Any]) -> None:
        self.notifications[notification["id"]] = notification

    def get_notifications(self, user_id: str) -> list[dict[str, Any]]:
        return [n for n in self.notifications.values() if n["user_id"] == user_id]


# Global singleton, reset between tests
data_store = DataStore()
