"""Activity/notification recorder for the side effects of lifecycle events.

Every lifecycle transition fans out into activity log entries (usually one
from the actor's perspective and one from the affected counterpart's) and
user-facing notifications. Recording is best-effort: the ``log_*`` fan-out
methods never raise, so a failing audit write or push delivery can not roll
back the transition that triggered it.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

import structlog

from greda_gbc.errors import NotFoundError, ValidationError
from greda_gbc.models.base import utcnow
from greda_gbc.services.notifier import NotificationPort, NullNotificationPort
from greda_gbc.services.roles import full_name
from greda_gbc.store import DataStore

logger = structlog.get_logger()

PRIORITIES = ("low", "medium", "high")

F = TypeVar("F", bound=Callable[..., Any])


def best_effort(func: F) -> F:
    """Log and swallow any failure raised by a fan-out method."""

    @functools.wraps(func)
    def wrapper(self: "ActivityRecorder", *args: Any, **kwargs: Any) -> Any:
        try:
            return func(self, *args, **kwargs)
        except Exception as exc:
            logger.warning("activity_record_failed", handler=func.__name__, error=str(exc))
            return None

    return wrapper  # type: ignore[return-value]


def _assessment_ref(assessment: dict[str, Any] | None) -> dict[str, Any]:
    if assessment is None:
        return {"assessment_id": None, "assessment_public_id": None, "building_name": None}
    return {
        "assessment_id": assessment["id"],
        "assessment_public_id": assessment["public_id"],
        "building_name": assessment.get("building_name"),
    }


def _building(assessment: dict[str, Any]) -> str:
    return assessment.get("building_name") or f"assessment {assessment['public_id'][:8]}"


class ActivityRecorder:
    """Writes activity logs and notifications, then pushes through a port."""

    def __init__(self, store: DataStore, notifier: NotificationPort | None = None) -> None:
        self.store = store
        self.notifier = notifier or NullNotificationPort()

    # ── Primitives ──

    def record(
        self,
        actor_id: str,
        activity_type: str,
        title: str,
        description: str,
        target_user_id: str | None = None,
        assessment: dict[str, Any] | None = None,
        priority: str = "medium",
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Append one activity log entry."""
        if priority not in PRIORITIES:
            raise ValidationError(f"Invalid priority '{priority}'", allowed=list(PRIORITIES))
        entry = {
            "id": self.store.next_id(),
            "user_id": actor_id,
            "activity_type": activity_type,
            "title": title,
            "description": description,
            "target_user_id": target_user_id,
            **_assessment_ref(assessment),
            "priority": priority,
            "metadata": dict(metadata or {}),
            "created_at": utcnow(),
        }
        self.store.add_activity_log(entry)
        logger.info("activity_recorded", activity_type=activity_type, user_id=actor_id)
        return entry

    def notify(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        assessment: dict[str, Any] | None = None,
        priority: str = "medium",
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Store a notification, then hand it to the port for real-time delivery.

        The notification is durable before delivery is attempted. The port
        returns without waiting on the network, and delivery failures are
        logged only.
        """
        if priority not in PRIORITIES:
            raise ValidationError(f"Invalid priority '{priority}'", allowed=list(PRIORITIES))
        notification = {
            "id": self.store.next_id(),
            "user_id": user_id,
            "type": notification_type,
            "title": title,
            "message": message,
            **_assessment_ref(assessment),
            "client_name": assessment.get("client_name") if assessment else None,
            "is_read": False,
            "priority": priority,
            "metadata": dict(metadata or {}),
            "created_at": utcnow(),
            "read_at": None,
        }
        self.store.add_notification(notification)

        try:
            self.notifier.send(user_id, {
                "type": "new_notification",
                "notification": {
                    "id": notification["id"],
                    "type": notification_type,
                    "title": title,
                    "message": message,
                    "priority": priority,
                    "is_read": False,
                    "created_at": notification["created_at"].isoformat(),
                },
                "count": self.unread_count(user_id),
            })
        except Exception as exc:
            logger.warning("notification_delivery_failed", user_id=user_id, type=notification_type, error=str(exc))
        return notification

    def _notify_admins(self, exclude: str | None = None, **kwargs: Any) -> None:
        for admin in self.store.get_users_by_role("admin"):
            if admin["id"] != exclude:
                self.notify(admin["id"], **kwargs)

    # ── Queries ──

    def list_activity(self, user_id: str, limit: int = 50) -> list[dict[str, Any]]:
        """Most recent activity entries from a user's perspective."""
        entries = self.store.get_activity_logs(user_id)
        return list(reversed(entries))[:limit]

    def list_notifications(self, user_id: str, unread_only: bool = False) -> list[dict[str, Any]]:
        notifications = self.store.get_notifications(user_id)
        if unread_only:
            notifications = [n for n in notifications if not n["is_read"]]
        return sorted(notifications, key=lambda n: n["id"], reverse=True)

    def unread_count(self, user_id: str) -> int:
        return sum(1 for n in self.store.get_notifications(user_id) if not n["is_read"])

    def mark_read(self, notification_id: int, user_id: str) -> dict[str, Any]:
        notification = self.store.notifications.get(notification_id)
        if notification is None or notification["user_id"] != user_id:
            raise NotFoundError("Notification not found", notification_id=notification_id)
        if not notification["is_read"]:
            notification["is_read"] = True
            notification["read_at"] = utcnow()
        return notification

    # ── Assessment lifecycle fan-out ──

    @best_effort
    def log_assessment_created(
        self, creator: dict[str, Any], assessment: dict[str, Any], client: dict[str, Any] | None
    ) -> None:
        self.record(
            creator["id"],
            "assessment_created",
            "Assessment Created",
            f"Created new assessment for {_building(assessment)}",
            target_user_id=client["id"] if client else None,
            assessment=assessment,
            priority="high",
            metadata={
                "client_name": assessment.get("client_name"),
                "building_location": assessment.get("building_location"),
                "creator_role": creator.get("role"),
            },
        )
        if client:
            self.notify(
                client["id"],
                "assessment_started",
                "Assessment Started",
                f"An assessment for {_building(assessment)} has been started by {full_name(creator)}",
                assessment=assessment,
                priority="medium",
                metadata={"assessor_id": creator["id"], "assessor_name": full_name(creator)},
            )

    @best_effort
    def log_assessment_completed(
        self, actor: dict[str, Any], assessment: dict[str, Any], client: dict[str, Any] | None
    ) -> None:
        scores = {
            "overall_score": assessment.get("overall_score"),
            "max_possible_score": assessment.get("max_possible_score"),
            "completed_sections": assessment.get("completed_sections"),
            "total_sections": assessment.get("total_sections"),
        }
        self.record(
            actor["id"],
            "assessment_completed",
            "Assessment Completed",
            f"Completed assessment for {_building(assessment)}",
            target_user_id=client["id"] if client else None,
            assessment=assessment,
            priority="high",
            metadata={**scores, "client_name": assessment.get("client_name")},
        )
        if client:
            self.record(
                client["id"],
                "assessment_completed",
                "Your Assessment is Complete",
                f"Your building assessment for {_building(assessment)} has been completed by {full_name(actor)}",
                target_user_id=actor["id"],
                assessment=assessment,
                priority="high",
                metadata={
                    **scores,
                    "assessor_name": full_name(actor),
                    "completion_date": assessment["conducted_at"].isoformat() if assessment.get("conducted_at") else None,
                },
            )
            self.notify(
                client["id"],
                "assessment_completed",
                "Your Assessment is Complete",
                f"Your building assessment for {_building(assessment)} has been completed and is ready for review",
                assessment=assessment,
                priority="high",
                metadata={"assessor_id": actor["id"], "assessor_name": full_name(actor)},
            )
        self._notify_admins(
            exclude=actor["id"],
            notification_type="assessment_completed",
            title="Assessment Completed",
            message=f"Assessment for {_building(assessment)} has been completed by {full_name(actor)}",
            assessment=assessment,
            priority="medium",
            metadata={
                "assessor_id": actor["id"],
                "assessor_name": full_name(actor),
                "client_id": assessment.get("client_id"),
            },
        )

    @best_effort
    def log_assessment_locked(
        self,
        admin: dict[str, Any],
        assessment: dict[str, Any],
        assessor: dict[str, Any] | None,
        client: dict[str, Any] | None,
        reason: str | None = None,
    ) -> None:
        self._lock_event(admin, assessment, assessor, client, locked=True, reason=reason)

    @best_effort
    def log_assessment_unlocked(
        self,
        admin: dict[str, Any],
        assessment: dict[str, Any],
        assessor: dict[str, Any] | None,
        client: dict[str, Any] | None,
    ) -> None:
        self._lock_event(admin, assessment, assessor, client, locked=False)

    def _lock_event(
        self,
        admin: dict[str, Any],
        assessment: dict[str, Any],
        assessor: dict[str, Any] | None,
        client: dict[str, Any] | None,
        locked: bool,
        reason: str | None = None,
    ) -> None:
        action = "locked" if locked else "unlocked"
        activity_type = f"assessment_{action}"
        metadata = {"reason": reason, "assessment_status": assessment.get("status"), "lock_action": action}

        self.record(
            admin["id"],
            activity_type,
            f"Assessment {action.title()}",
            f"{action.title()} {_building(assessment)} for editing",
            target_user_id=assessor["id"] if assessor else None,
            assessment=assessment,
            priority="medium",
            metadata=metadata,
        )
        if assessor and assessor["id"] != admin["id"]:
            self.record(
                assessor["id"],
                activity_type,
                f"Assessment {action.title()}",
                f"{_building(assessment)} was {action} by {full_name(admin)}",
                target_user_id=admin["id"],
                assessment=assessment,
                priority="medium",
                metadata={**metadata, "admin_name": full_name(admin)},
            )

        if locked:
            assessor_message = (
                f"{_building(assessment)} has been locked by an administrator. "
                "Submit an edit request to make further changes."
            )
            client_message = f"Your assessment for {_building(assessment)} has been finalised"
        else:
            assessor_message = f"{_building(assessment)} has been unlocked and can be edited again"
            client_message = f"Your assessment for {_building(assessment)} has been reopened for editing"

        for recipient, message in ((assessor, assessor_message), (client, client_message)):
            if recipient and recipient["id"] != admin["id"]:
                self.notify(
                    recipient["id"],
                    activity_type,
                    f"Assessment {action.title()}",
                    message,
                    assessment=assessment,
                    priority="medium",
                    metadata={"admin_id": admin["id"], "admin_name": full_name(admin), "reason": reason},
                )

    @best_effort
    def log_assessment_archived(self, admin: dict[str, Any], assessment: dict[str, Any]) -> None:
        self.record(
            admin["id"],
            "assessment_archived",
            "Assessment Archived",
            f"Archived {_building(assessment)}",
            target_user_id=assessment.get("user_id"),
            assessment=assessment,
            priority="low",
            metadata={"assessment_status": assessment.get("status"), "overall_score": assessment.get("overall_score")},
        )

    # ── Edit request fan-out ──

    @best_effort
    def log_edit_request_created(
        self,
        requester: dict[str, Any],
        assessment: dict[str, Any],
        owner: dict[str, Any] | None,
        reason: str,
    ) -> None:
        self.record(
            requester["id"],
            "edit_request_created",
            "Edit Request Submitted",
            f"{full_name(requester)} requested permission to edit {_building(assessment)}",
            target_user_id=owner["id"] if owner else None,
            assessment=assessment,
            priority="medium",
            metadata={
                "reason": reason,
                "assessment_status": assessment.get("status"),
                "requesting_user_role": requester.get("role"),
            },
        )
        notice = {
            "notification_type": "edit_request_created",
            "title": "Edit Request Submitted",
            "message": f"{full_name(requester)} has requested to edit {_building(assessment)}: {reason}",
            "assessment": assessment,
            "priority": "high",
            "metadata": {
                "requesting_user_id": requester["id"],
                "requesting_user_name": full_name(requester),
                "reason": reason,
            },
        }
        self._notify_admins(**notice)
        if owner and owner["id"] != requester["id"] and owner.get("role") != "admin":
            self.notify(owner["id"], **notice)

    @best_effort
    def log_edit_request_approved(
        self, admin: dict[str, Any], requester: dict[str, Any], assessment: dict[str, Any]
    ) -> None:
        self._edit_request_resolution(admin, requester, assessment, approved=True)

    @best_effort
    def log_edit_request_denied(
        self,
        admin: dict[str, Any],
        requester: dict[str, Any],
        assessment: dict[str, Any],
        reason: str | None = None,
    ) -> None:
        self._edit_request_resolution(admin, requester, assessment, approved=False, reason=reason)

    def _edit_request_resolution(
        self,
        admin: dict[str, Any],
        requester: dict[str, Any],
        assessment: dict[str, Any],
        approved: bool,
        reason: str | None = None,
    ) -> None:
        outcome = "approved" if approved else "denied"
        activity_type = f"edit_request_{outcome}"
        title = f"Edit Request {outcome.title()}"
        priority = "high" if approved else "medium"

        self.record(
            admin["id"],
            activity_type,
            title,
            f"{outcome.title()} {full_name(requester)}'s request to edit {_building(assessment)}",
            target_user_id=requester["id"],
            assessment=assessment,
            priority=priority,
            metadata={
                "reason": reason,
                "requesting_user_name": full_name(requester),
                "requesting_user_role": requester.get("role"),
                "assessment_status": assessment.get("status"),
            },
        )
        self.record(
            requester["id"],
            activity_type,
            title,
            f"Your request to edit {_building(assessment)} was {outcome} by {full_name(admin)}",
            target_user_id=admin["id"],
            assessment=assessment,
            priority=priority,
            metadata={
                "reason": reason,
                "admin_name": full_name(admin),
                "assessment_status": assessment.get("status"),
                "action_taken": outcome,
            },
        )
        if approved:
            message = f"Your request to edit {_building(assessment)} has been approved. The assessment is now unlocked."
        else:
            message = f"Your request to edit {_building(assessment)} was denied" + (f": {reason}" if reason else "")
        self.notify(
            requester["id"],
            activity_type,
            title,
            message,
            assessment=assessment,
            priority=priority,
            metadata={"admin_id": admin["id"], "admin_name": full_name(admin), "reason": reason},
        )

    # ── User administration fan-out ──

    @best_effort
    def log_user_created(self, admin: dict[str, Any], new_user: dict[str, Any], invitation_type: str) -> None:
        self.record(
            admin["id"],
            "user_created",
            "User Created",
            f"Created new {new_user['role']} account for {full_name(new_user)}",
            target_user_id=new_user["id"],
            priority="high",
            metadata={
                "new_user_email": new_user.get("email"),
                "new_user_role": new_user["role"],
                "invitation_type": invitation_type,
            },
        )
        self.record(
            new_user["id"],
            "account_created",
            "Account Created",
            f"Your {new_user['role']} account was created by {full_name(admin)}",
            target_user_id=admin["id"],
            priority="high",
            metadata={
                "created_by_admin": full_name(admin),
                "account_role": new_user["role"],
                "invitation_type": invitation_type,
            },
        )

    @best_effort
    def log_user_status_changed(
        self, admin: dict[str, Any], target: dict[str, Any], old_status: str, new_status: str
    ) -> None:
        self.record(
            admin["id"],
            "user_status_changed",
            "User Status Updated",
            f"Changed {full_name(target)}'s status from {old_status} to {new_status}",
            target_user_id=target["id"],
            priority="medium",
            metadata={
                "target_user_email": target.get("email"),
                "target_user_role": target.get("role"),
                "old_status": old_status,
                "new_status": new_status,
            },
        )
        self.record(
            target["id"],
            "account_status_changed",
            "Account Status Updated",
            f"Your account status was changed from {old_status} to {new_status} by {full_name(admin)}",
            target_user_id=admin["id"],
            priority="high",
            metadata={"admin_name": full_name(admin), "old_status": old_status, "new_status": new_status},
        )
