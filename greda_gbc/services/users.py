"""User administration and invitation onboarding."""

from __future__ import annotations

import secrets
import uuid
from datetime import timedelta
from typing import Any

import structlog

from greda_gbc.config import Settings
from greda_gbc.errors import ConflictError, NotFoundError, ValidationError
from greda_gbc.models.base import utcnow
from greda_gbc.services.activity import ActivityRecorder
from greda_gbc.services.roles import (
    Role,
    SubscriptionStatus,
    SubscriptionTier,
    UserStatus,
    require_admin,
)
from greda_gbc.store import DataStore

logger = structlog.get_logger()


def _check_choice(value: str, enum: type, label: str) -> str:
    allowed = [member.value for member in enum]
    if value not in allowed:
        raise ValidationError(f"Invalid {label} '{value}'", allowed=allowed)
    return value


class UserService:
    """Admin-controlled user lifecycle. Users are never hard-deleted."""

    def __init__(self, store: DataStore, recorder: ActivityRecorder, settings: Settings | None = None) -> None:
        self.store = store
        self.recorder = recorder
        self.settings = settings or Settings()

    def get_user(self, user_id: str) -> dict[str, Any]:
        user = self.store.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found", user_id=user_id)
        return user

    def _new_user(
        self,
        email: str,
        role: str,
        first_name: str | None = None,
        last_name: str | None = None,
        subscription_tier: str = SubscriptionTier.FREE.value,
        organization_name: str | None = None,
        phone_number: str | None = None,
        invited_by: str | None = None,
    ) -> dict[str, Any]:
        _check_choice(role, Role, "role")
        _check_choice(subscription_tier, SubscriptionTier, "subscription tier")
        if self.store.get_user_by_email(email) is not None:
            raise ConflictError("A user with this email already exists", email=email)

        now = utcnow()
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
            "status": UserStatus.ACTIVE.value,
            "subscription_tier": subscription_tier,
            "subscription_status": SubscriptionStatus.INACTIVE.value,
            "organization_name": organization_name,
            "phone_number": phone_number,
            "invited_by": invited_by,
            "last_login_at": None,
            "created_at": now,
            "updated_at": now,
        }
        self.store.add_user(user)
        return user

    def create_user(self, admin: dict[str, Any], email: str, role: str, **profile: Any) -> dict[str, Any]:
        """Direct creation by an admin; the account is active immediately."""
        require_admin(admin, "create users")
        user = self._new_user(email, role, invited_by=admin["id"], **profile)
        logger.info("user_created", user_id=user["id"], role=role, admin_id=admin["id"])
        self.recorder.log_user_created(admin, user, "direct")
        return user

    def update_user_status(self, admin: dict[str, Any], user_id: str, status: str) -> dict[str, Any]:
        require_admin(admin, "change user status")
        _check_choice(status, UserStatus, "status")
        user = self.get_user(user_id)
        if user["id"] == admin["id"]:
            raise ValidationError("Administrators cannot change their own status")

        old_status = user["status"]
        if old_status == status:
            return user
        user["status"] = status
        user["updated_at"] = utcnow()
        logger.info("user_status_changed", user_id=user_id, old_status=old_status, new_status=status)
        self.recorder.log_user_status_changed(admin, user, old_status, status)
        return user

    def update_subscription(
        self,
        admin: dict[str, Any],
        user_id: str,
        subscription_tier: str | None = None,
        subscription_status: str | None = None,
    ) -> dict[str, Any]:
        """Subscriptions gate client features, so only clients carry one."""
        require_admin(admin, "manage subscriptions")
        user = self.get_user(user_id)
        if user["role"] != Role.CLIENT.value:
            raise ValidationError("Subscriptions apply to client accounts only", user_role=user["role"])
        if subscription_tier is not None:
            user["subscription_tier"] = _check_choice(subscription_tier, SubscriptionTier, "subscription tier")
        if subscription_status is not None:
            user["subscription_status"] = _check_choice(subscription_status, SubscriptionStatus, "subscription status")
        user["updated_at"] = utcnow()
        logger.info(
            "subscription_updated",
            user_id=user_id,
            tier=user["subscription_tier"],
            status=user["subscription_status"],
        )
        return user

    # Invitations

    def create_invitation(
        self,
        admin: dict[str, Any],
        email: str,
        role: str = Role.CLIENT.value,
        subscription_tier: str = SubscriptionTier.FREE.value,
        organization_name: str | None = None,
    ) -> dict[str, Any]:
        require_admin(admin, "invite users")
        _check_choice(role, Role, "role")
        _check_choice(subscription_tier, SubscriptionTier, "subscription tier")
        if self.store.get_user_by_email(email) is not None:
            raise ConflictError("A user with this email already exists", email=email)

        now = utcnow()
        invitation = {
            "id": self.store.next_id(),
            "email": email,
            "role": role,
            "subscription_tier": subscription_tier,
            "organization_name": organization_name,
            "invited_by": admin["id"],
            "status": "pending",
            "token": secrets.token_urlsafe(32),
            "expires_at": now + timedelta(days=self.settings.invitation_expiry_days),
            "created_at": now,
        }
        self.store.invitations[invitation["token"]] = invitation
        logger.info("invitation_created", email=email, role=role, admin_id=admin["id"])
        return invitation

    def accept_invitation(
        self,
        token: str,
        first_name: str | None = None,
        last_name: str | None = None,
        phone_number: str | None = None,
    ) -> dict[str, Any]:
        invitation = self.store.invitations.get(token)
        if invitation is None:
            raise NotFoundError("Invitation not found")
        if invitation["status"] != "pending":
            raise ConflictError(f"Invitation is {invitation['status']}", status=invitation["status"])
        if invitation["expires_at"] <= utcnow():
            invitation["status"] = "expired"
            raise ValidationError("Invitation has expired", expires_at=invitation["expires_at"].isoformat())

        user = self._new_user(
            invitation["email"],
            invitation["role"],
            first_name=first_name,
            last_name=last_name,
            subscription_tier=invitation["subscription_tier"],
            organization_name=invitation["organization_name"],
            phone_number=phone_number,
            invited_by=invitation["invited_by"],
        )
        invitation["status"] = "accepted"
        logger.info("invitation_accepted", user_id=user["id"], email=user["email"])

        inviter = self.store.get_user(invitation["invited_by"])
        if inviter is not None:
            self.recorder.log_user_created(inviter, user, "invitation")
        return user
