"""Identity and role model used by the authorisation checks."""

from __future__ import annotations

from enum import Enum
from typing import Any

from greda_gbc.errors import PermissionDeniedError


class Role(str, Enum):
    ADMIN = "admin"
    ASSESSOR = "assessor"
    CLIENT = "client"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    PENDING = "pending"


class SubscriptionTier(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TRIAL = "trial"
    CANCELLED = "cancelled"


# Roles allowed to conduct assessments
ASSESSING_ROLES = {Role.ADMIN.value, Role.ASSESSOR.value}


def is_admin(user: dict[str, Any]) -> bool:
    return user.get("role") == Role.ADMIN.value


def can_conduct_assessments(role: str) -> bool:
    """Admins and assessors may create and score assessments."""
    return role in ASSESSING_ROLES


def can_bypass_lock(role: str) -> bool:
    """Single capability check for overriding an assessment lock."""
    return role == Role.ADMIN.value


def full_name(user: dict[str, Any]) -> str:
    """Display name, falling back to the email address."""
    name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    return name or user.get("email") or user.get("id", "unknown")


def require_active(user: dict[str, Any]) -> None:
    """Suspended and pending accounts cannot act."""
    if user.get("status") != UserStatus.ACTIVE.value:
        raise PermissionDeniedError(
            f"Account is {user.get('status')} and cannot perform this action",
            user_status=user.get("status"),
        )


def require_admin(user: dict[str, Any], action: str) -> None:
    """Raise unless *user* is an active admin."""
    require_active(user)
    if not is_admin(user):
        raise PermissionDeniedError(
            f"Only administrators can {action}",
            required_role=Role.ADMIN.value,
            user_role=user.get("role"),
        )
