"""Tests for user administration and invitation onboarding."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import make_user
from greda_gbc.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from greda_gbc.models.base import utcnow
from greda_gbc.store import data_store


class TestCreateUser:
    """Direct admin creation."""

    def test_creates_active_user(self, user_service, admin):
        user = user_service.create_user(admin, "new@greda.test", "assessor", first_name="Adjoa")
        assert user["status"] == "active"
        assert user["invited_by"] == admin["id"]
        assert data_store.get_user(user["id"]) is user

    def test_logs_both_perspectives(self, user_service, admin):
        user = user_service.create_user(admin, "new@greda.test", "client")
        assert [e["activity_type"] for e in data_store.get_activity_logs(admin["id"])] == ["user_created"]
        assert [e["activity_type"] for e in data_store.get_activity_logs(user["id"])] == ["account_created"]

    def test_duplicate_email_case_insensitive(self, user_service, admin):
        user_service.create_user(admin, "dup@greda.test", "client")
        with pytest.raises(ConflictError):
            user_service.create_user(admin, "DUP@greda.test", "client")

    def test_invalid_role(self, user_service, admin):
        with pytest.raises(ValidationError):
            user_service.create_user(admin, "x@greda.test", "superuser")

    def test_non_admin_cannot_create(self, user_service, assessor):
        with pytest.raises(PermissionDeniedError):
            user_service.create_user(assessor, "x@greda.test", "client")


class TestUserStatus:
    """Suspension and reactivation."""

    def test_suspend_blocks_actions(self, user_service, service, admin, assessor, client_user):
        user_service.update_user_status(admin, assessor["id"], "suspended")
        assert assessor["status"] == "suspended"
        with pytest.raises(PermissionDeniedError):
            service.create_assessment(assessor, client_user["id"])

    def test_status_change_logged_twice(self, user_service, admin, assessor):
        user_service.update_user_status(admin, assessor["id"], "suspended")
        assert "user_status_changed" in [e["activity_type"] for e in data_store.get_activity_logs(admin["id"])]
        assert "account_status_changed" in [e["activity_type"] for e in data_store.get_activity_logs(assessor["id"])]

    def test_same_status_is_noop(self, user_service, admin, assessor):
        user_service.update_user_status(admin, assessor["id"], "active")
        assert data_store.activity_logs == []

    def test_admin_cannot_change_own_status(self, user_service, admin):
        with pytest.raises(ValidationError):
            user_service.update_user_status(admin, admin["id"], "suspended")

    def test_unknown_user(self, user_service, admin):
        with pytest.raises(NotFoundError):
            user_service.update_user_status(admin, "ghost", "active")

    def test_invalid_status(self, user_service, admin, assessor):
        with pytest.raises(ValidationError):
            user_service.update_user_status(admin, assessor["id"], "deleted")


class TestSubscriptions:
    """Client subscription management."""

    def test_update_client_subscription(self, user_service, admin, client_user):
        user = user_service.update_subscription(admin, client_user["id"], "premium", "active")
        assert user["subscription_tier"] == "premium"
        assert user["subscription_status"] == "active"

    def test_partial_update(self, user_service, admin, client_user):
        user_service.update_subscription(admin, client_user["id"], subscription_status="trial")
        assert client_user["subscription_tier"] == "free"
        assert client_user["subscription_status"] == "trial"

    def test_assessors_have_no_subscription(self, user_service, admin, assessor):
        with pytest.raises(ValidationError):
            user_service.update_subscription(admin, assessor["id"], "premium")

    def test_invalid_tier(self, user_service, admin, client_user):
        with pytest.raises(ValidationError):
            user_service.update_subscription(admin, client_user["id"], "platinum")


class TestInvitations:
    """Token-based onboarding."""

    def test_create_invitation(self, user_service, admin):
        invitation = user_service.create_invitation(admin, "invitee@greda.test", "assessor")
        assert invitation["status"] == "pending"
        assert len(invitation["token"]) >= 40
        assert invitation["expires_at"] - invitation["created_at"] == timedelta(days=7)

    def test_accept_creates_user(self, user_service, admin):
        invitation = user_service.create_invitation(admin, "invitee@greda.test", "client", "basic", "Acme Ltd")
        user = user_service.accept_invitation(invitation["token"], "Afia", "Darko", "+233200000000")
        assert user["role"] == "client"
        assert user["subscription_tier"] == "basic"
        assert user["organization_name"] == "Acme Ltd"
        assert user["invited_by"] == admin["id"]
        assert invitation["status"] == "accepted"
        assert "user_created" in [e["activity_type"] for e in data_store.get_activity_logs(admin["id"])]

    def test_accept_twice_conflicts(self, user_service, admin):
        invitation = user_service.create_invitation(admin, "invitee@greda.test")
        user_service.accept_invitation(invitation["token"])
        with pytest.raises(ConflictError):
            user_service.accept_invitation(invitation["token"])

    def test_expired_invitation(self, user_service, admin):
        invitation = user_service.create_invitation(admin, "late@greda.test")
        invitation["expires_at"] = utcnow() - timedelta(seconds=1)
        with pytest.raises(ValidationError):
            user_service.accept_invitation(invitation["token"])
        assert invitation["status"] == "expired"
        assert data_store.get_user_by_email("late@greda.test") is None

    def test_unknown_token(self, user_service):
        with pytest.raises(NotFoundError):
            user_service.accept_invitation("nope")

    def test_cannot_invite_existing_email(self, user_service, admin, assessor):
        with pytest.raises(ConflictError):
            user_service.create_invitation(admin, assessor["email"])

    def test_only_admin_invites(self, user_service, assessor):
        with pytest.raises(PermissionDeniedError):
            user_service.create_invitation(assessor, "x@greda.test")

    def test_expiry_follows_settings(self, recorder, admin):
        from greda_gbc.config import Settings
        from greda_gbc.services.users import UserService

        service = UserService(data_store, recorder, Settings(invitation_expiry_days=14))
        invitation = service.create_invitation(admin, "later@greda.test")
        assert invitation["expires_at"] - invitation["created_at"] == timedelta(days=14)

    def test_suspended_admin_cannot_invite(self, user_service):
        suspended = make_user("admin", "Nana", status="suspended")
        with pytest.raises(PermissionDeniedError):
            user_service.create_invitation(suspended, "x@greda.test")
