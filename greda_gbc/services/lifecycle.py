"""Assessment lifecycle state machine.

Governs how an assessment moves through its states and who may move it:

    [draft] --(save sections)--> [draft]
    [draft] --(complete)--> [completed, unlocked]
    [completed, unlocked] --(admin lock)--> [completed, locked]
    [completed, locked] --(admin unlock | approved edit request)--> [completed, unlocked]
    [completed, unlocked] --(edit sections)--> [completed, unlocked]

Locking is advisory at the application layer: the flag is checked before a
mutation is accepted; concurrent requests are not serialised. Callers that
need stale-write detection pass ``expected_version``.
"""

from __future__ import annotations

import math
import uuid
from typing import Any

import structlog

from greda_gbc.config import Settings
from greda_gbc.errors import (
    AssessmentLockedError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from greda_gbc.models.base import utcnow
from greda_gbc.services import catalog, evidence, scoring
from greda_gbc.services.activity import ActivityRecorder
from greda_gbc.services.roles import (
    Role,
    can_bypass_lock,
    can_conduct_assessments,
    full_name,
    is_admin,
    require_active,
    require_admin,
)
from greda_gbc.store import DataStore

logger = structlog.get_logger()

DRAFT = "draft"
COMPLETED = "completed"

BUILDING_FIELDS = (
    "building_name",
    "client_name",
    "building_location",
    "digital_address",
    "phone_number",
    "additional_notes",
    "building_footprint",
    "room_height",
    "number_of_bedrooms",
    "site_area",
    "number_of_windows",
    "number_of_doors",
    "average_window_size",
    "number_of_floors",
    "total_green_area",
)


class AssessmentService:
    """Entry point for every assessment operation."""

    def __init__(
        self,
        store: DataStore,
        recorder: ActivityRecorder,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.recorder = recorder
        self.settings = settings or Settings()

    # ── Resolution and authorisation ──

    def _resolve(self, public_id: str) -> dict[str, Any]:
        assessment = self.store.get_assessment_by_public_id(public_id)
        if assessment is None:
            raise NotFoundError("Assessment not found", public_id=public_id)
        return assessment

    def _resolve_for_read(self, public_id: str, actor: dict[str, Any]) -> dict[str, Any]:
        """Admins see everything; others only assessments they own or commissioned."""
        require_active(actor)
        assessment = self._resolve(public_id)
        if is_admin(actor):
            return assessment
        if actor["id"] not in (assessment["user_id"], assessment["client_id"]):
            raise NotFoundError("Assessment not found", public_id=public_id)
        return assessment

    def _resolve_for_write(
        self,
        public_id: str,
        actor: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        require_active(actor)
        assessment = self._resolve(public_id)
        role = actor.get("role")

        if role == Role.CLIENT.value:
            raise PermissionDeniedError(
                "Clients cannot modify assessments",
                required_role="assessor",
                user_role=role,
            )
        if not is_admin(actor) and assessment["user_id"] != actor["id"]:
            raise PermissionDeniedError(
                "Only the owning assessor or an administrator can modify this assessment",
                user_role=role,
            )
        if assessment.get("is_archived"):
            raise ConflictError("Archived assessments cannot be modified", is_archived=True)
        if assessment["is_locked"] and not can_bypass_lock(role):
            raise AssessmentLockedError(
                "Assessment is locked and cannot be edited. Submit an edit request to an administrator.",
                is_locked=True,
                status=assessment["status"],
                can_request_edit=assessment["status"] == COMPLETED,
            )
        self._check_version(assessment, expected_version)
        return assessment

    @staticmethod
    def _check_version(assessment: dict[str, Any], expected_version: int | None) -> None:
        if expected_version is not None and expected_version != assessment["version"]:
            raise ConflictError(
                "Assessment was modified by someone else; reload and try again",
                expected_version=expected_version,
                current_version=assessment["version"],
            )

    def _touch(self, assessment: dict[str, Any], actor: dict[str, Any]) -> None:
        """Bump the version and record who last edited, if not the conductor."""
        now = utcnow()
        assessment["version"] += 1
        assessment["updated_at"] = now
        if actor["id"] != assessment["user_id"]:
            assessment["last_edited_by"] = actor["id"]
            assessment["last_edited_by_name"] = full_name(actor)
            assessment["last_edited_at"] = now

    def _party(self, user_id: str | None) -> dict[str, Any] | None:
        return self.store.get_user(user_id) if user_id else None

    # ── Schema operations ──

    def create_assessment(
        self,
        owner: dict[str, Any],
        client_id: str,
        building_metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Start a new draft assessment owned by *owner* for *client_id*."""
        if not can_conduct_assessments(owner.get("role", "")):
            raise ValidationError(
                "Only administrators and assessors can create assessments",
                user_role=owner.get("role"),
            )
        require_active(owner)

        client = self.store.get_user(client_id)
        if client is None or client.get("role") != Role.CLIENT.value:
            raise ValidationError("Client must be an existing client user", client_id=client_id)

        metadata = dict(building_metadata or {})
        unknown = sorted(set(metadata) - set(BUILDING_FIELDS))
        if unknown:
            raise ValidationError("Unknown building metadata fields", fields=unknown)

        now = utcnow()
        assessment: dict[str, Any] = {
            "id": self.store.next_id(),
            "public_id": str(uuid.uuid4()),
            "user_id": owner["id"],
            "client_id": client["id"],
            "status": DRAFT,
            "is_locked": False,
            "locked_by": None,
            "locked_at": None,
            **{field: metadata.get(field) for field in BUILDING_FIELDS},
            "overall_score": 0.0,
            "max_possible_score": 0.0,
            "completed_sections": 0,
            "total_sections": catalog.TOTAL_SECTIONS,
            "assessor_name": full_name(owner),
            "assessor_role": owner["role"],
            "conducted_at": None,
            "last_edited_by": None,
            "last_edited_by_name": None,
            "last_edited_at": None,
            "pending_edit_request": None,
            "version": 1,
            "is_archived": False,
            "archived_by": None,
            "archived_at": None,
            "created_at": now,
            "updated_at": now,
        }
        if not assessment["client_name"]:
            assessment["client_name"] = full_name(client)

        self.store.add_assessment(assessment)
        logger.info("assessment_created", public_id=assessment["public_id"], user_id=owner["id"])
        self.recorder.log_assessment_created(owner, assessment, client)
        return assessment

    def _validate_section(
        self,
        section_type: str,
        variables: dict[str, Any],
        location_data: dict[str, Any],
    ) -> tuple[dict[str, float], dict[str, Any]]:
        """Check values against the catalog; returns cleaned copies."""
        if not catalog.is_section_type(section_type):
            raise ValidationError(
                f"Unknown section '{section_type}'",
                section_type=section_type,
                allowed=catalog.SECTION_TYPES,
            )

        cleaned: dict[str, float] = {}
        for variable_id, value in variables.items():
            variable = catalog.get_variable(section_type, variable_id)
            if variable is None:
                raise ValidationError(
                    f"Unknown variable '{variable_id}' for section '{section_type}'",
                    section_type=section_type,
                    variable=variable_id,
                )
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValidationError(f"Score for '{variable_id}' must be a number", variable=variable_id)
            if not 0 <= value <= variable.max_score:
                raise ValidationError(
                    f"Score for '{variable_id}' must be between 0 and {variable.max_score}",
                    variable=variable_id,
                    value=value,
                    max_score=variable.max_score,
                )
            cleaned[variable_id] = float(value)

        locations: dict[str, Any] = {}
        for variable_id, location in location_data.items():
            variable = catalog.get_variable(section_type, variable_id)
            if variable is None or not variable.requires_location:
                raise ValidationError(
                    f"Variable '{variable_id}' does not take a location",
                    section_type=section_type,
                    variable=variable_id,
                )
            locations[variable_id] = evidence.validate_location(variable_id, location)
        return cleaned, locations

    def upsert_section(
        self,
        public_id: str,
        actor: dict[str, Any],
        section_type: str,
        variables: dict[str, Any] | None = None,
        location_data: dict[str, Any] | None = None,
        is_completed: bool = False,
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """Create or replace one section and recompute the assessment's scores.

        Validation happens before anything is written, so a rejected save
        leaves both the section and the aggregate scores untouched.
        """
        assessment = self._resolve_for_write(public_id, actor, expected_version)
        cleaned, locations = self._validate_section(section_type, variables or {}, location_data or {})

        now = utcnow()
        existing = self.store.get_section(assessment["id"], section_type)
        section = {
            "id": existing["id"] if existing else self.store.next_id(),
            "assessment_id": assessment["id"],
            "section_type": section_type,
            "section_name": catalog.SECTION_NAMES[section_type],
            "score": scoring.compute_section_score(section_type, cleaned),
            "max_score": scoring.compute_section_max_score(section_type),
            "is_completed": bool(is_completed),
            "variables": cleaned,
            "location_data": locations,
            "created_at": existing["created_at"] if existing else now,
            "updated_at": now,
        }
        self.store.upsert_section(section)
        assessment.update(scoring.compute_overall_score(self.store.get_sections(assessment["id"])))
        self._touch(assessment, actor)

        logger.info(
            "section_saved",
            public_id=public_id,
            section_type=section_type,
            score=section["score"],
            is_completed=section["is_completed"],
            overall_score=assessment["overall_score"],
        )
        return section

    def attach_media(
        self,
        public_id: str,
        actor: dict[str, Any],
        section_type: str,
        field_name: str,
        file_name: str,
        file_type: str,
        file_path: str,
        file_size: int | None = None,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        """Record an evidence file reference under the section write rules."""
        assessment = self._resolve_for_write(public_id, actor)
        if not catalog.is_section_type(section_type):
            raise ValidationError(f"Unknown section '{section_type}'", section_type=section_type)
        media = evidence.build_media_record(
            assessment["id"], section_type, field_name, file_name, file_type, file_path, file_size, mime_type
        )
        media["id"] = self.store.next_id()
        media["created_at"] = utcnow()
        self.store.add_media(assessment["id"], media)
        self._touch(assessment, actor)
        logger.info("media_attached", public_id=public_id, section_type=section_type, field_name=field_name)
        return media

    # ── Lifecycle transitions ──

    def complete_assessment(
        self,
        public_id: str,
        actor: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """draft -> completed. Completing an already completed assessment is a no-op."""
        assessment = self._resolve_for_write(public_id, actor, expected_version)
        if assessment["status"] == COMPLETED:
            return assessment

        if (
            self.settings.require_all_sections_for_completion
            and assessment["completed_sections"] < assessment["total_sections"]
        ):
            raise ValidationError(
                "All sections must be completed before the assessment can be completed",
                completed_sections=assessment["completed_sections"],
                total_sections=assessment["total_sections"],
            )

        assessment["status"] = COMPLETED
        if assessment["conducted_at"] is None:
            assessment["conducted_at"] = utcnow()
        self._touch(assessment, actor)

        logger.info(
            "assessment_completed",
            public_id=public_id,
            overall_score=assessment["overall_score"],
            rating=scoring.rating_tier(assessment["overall_score"]).value,
        )
        self.recorder.log_assessment_completed(actor, assessment, self._party(assessment["client_id"]))
        return assessment

    def lock(self, public_id: str, admin: dict[str, Any], reason: str | None = None) -> dict[str, Any]:
        """Admin-only: block further edits by the assessor."""
        require_admin(admin, "lock assessments")
        assessment = self._resolve(public_id)
        if assessment["is_locked"]:
            raise ConflictError("Assessment is already locked", is_locked=True)

        assessment["is_locked"] = True
        assessment["locked_by"] = admin["id"]
        assessment["locked_at"] = utcnow()
        self._touch(assessment, admin)

        logger.info("assessment_locked", public_id=public_id, admin_id=admin["id"])
        self.recorder.log_assessment_locked(
            admin, assessment, self._party(assessment["user_id"]), self._party(assessment["client_id"]), reason
        )
        return assessment

    def unlock(self, public_id: str, admin: dict[str, Any]) -> dict[str, Any]:
        """Admin-only: reopen an assessment for editing."""
        require_admin(admin, "unlock assessments")
        assessment = self._resolve(public_id)
        if not assessment["is_locked"]:
            raise ConflictError("Assessment is not locked", is_locked=False)

        self._release_lock(assessment, admin)
        logger.info("assessment_unlocked", public_id=public_id, admin_id=admin["id"])
        self.recorder.log_assessment_unlocked(
            admin, assessment, self._party(assessment["user_id"]), self._party(assessment["client_id"])
        )
        return assessment

    def _release_lock(self, assessment: dict[str, Any], admin: dict[str, Any]) -> None:
        assessment["is_locked"] = False
        assessment["locked_by"] = None
        assessment["locked_at"] = None
        # A direct unlock also settles any outstanding edit request
        assessment["pending_edit_request"] = None
        self._touch(assessment, admin)

    # ── Edit requests ──

    def request_edit(self, public_id: str, requester: dict[str, Any], reason: str | None = None) -> dict[str, Any]:
        """Assessor appeal to unlock a completed, locked assessment. No state change."""
        require_active(requester)
        if requester.get("role") != Role.ASSESSOR.value:
            raise PermissionDeniedError(
                "Only assessors can request edit access",
                required_role=Role.ASSESSOR.value,
                user_role=requester.get("role"),
            )
        assessment = self._resolve(public_id)
        if assessment["status"] != COMPLETED or not assessment["is_locked"]:
            raise ValidationError(
                "Only completed, locked assessments can be requested for editing",
                status=assessment["status"],
                is_locked=assessment["is_locked"],
            )
        if assessment["pending_edit_request"] is not None:
            raise ConflictError(
                "An edit request is already pending for this assessment",
                requested_by=assessment["pending_edit_request"]["requested_by"],
            )

        reason = (reason or "").strip() or "No reason provided"
        request = {
            "requested_by": requester["id"],
            "requester_name": full_name(requester),
            "reason": reason,
            "requested_at": utcnow(),
        }
        assessment["pending_edit_request"] = request

        logger.info("edit_request_created", public_id=public_id, requested_by=requester["id"])
        self.recorder.log_edit_request_created(requester, assessment, self._party(assessment["user_id"]), reason)
        return request

    def _pending_request(self, assessment: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        request = assessment["pending_edit_request"]
        if request is None:
            raise NotFoundError("Edit request not found", public_id=assessment["public_id"])
        requester = self.store.get_user(request["requested_by"])
        if requester is None:
            raise NotFoundError("Requesting user not found", user_id=request["requested_by"])
        return request, requester

    def approve_edit(self, public_id: str, admin: dict[str, Any]) -> dict[str, Any]:
        """Admin grants a pending edit request: the assessment is unlocked."""
        require_admin(admin, "approve edit requests")
        assessment = self._resolve(public_id)
        _, requester = self._pending_request(assessment)

        self._release_lock(assessment, admin)
        logger.info("edit_request_approved", public_id=public_id, admin_id=admin["id"], requester_id=requester["id"])
        self.recorder.log_edit_request_approved(admin, requester, assessment)
        return assessment

    def deny_edit(self, public_id: str, admin: dict[str, Any], reason: str | None = None) -> dict[str, Any]:
        """Admin rejects a pending edit request; the lock stays in place."""
        require_admin(admin, "deny edit requests")
        assessment = self._resolve(public_id)
        _, requester = self._pending_request(assessment)

        assessment["pending_edit_request"] = None
        logger.info("edit_request_denied", public_id=public_id, admin_id=admin["id"], requester_id=requester["id"])
        self.recorder.log_edit_request_denied(admin, requester, assessment, reason)
        return assessment

    # ── Administration and reads ──

    def archive_assessment(self, public_id: str, admin: dict[str, Any]) -> dict[str, Any]:
        """Admin-only soft delete: hidden from listings, rejects further writes."""
        require_admin(admin, "archive assessments")
        assessment = self._resolve(public_id)
        if assessment["is_archived"]:
            raise ConflictError("Assessment is already archived", is_archived=True)

        assessment["is_archived"] = True
        assessment["archived_by"] = admin["id"]
        assessment["archived_at"] = utcnow()
        self._touch(assessment, admin)
        logger.info("assessment_archived", public_id=public_id, admin_id=admin["id"])
        self.recorder.log_assessment_archived(admin, assessment)
        return assessment

    def get_sections(self, assessment: dict[str, Any]) -> list[dict[str, Any]]:
        """Stored sections in catalog order."""
        order = {key: i for i, key in enumerate(catalog.SECTION_TYPES)}
        return sorted(self.store.get_sections(assessment["id"]), key=lambda s: order[s["section_type"]])

    def get_assessment(self, public_id: str, actor: dict[str, Any]) -> dict[str, Any]:
        """Full view: assessment, sections, media references, advisories and rating."""
        assessment = self._resolve_for_read(public_id, actor)
        sections = self.get_sections(assessment)
        media = self.store.get_media(assessment["id"])
        return {
            "assessment": assessment,
            "sections": sections,
            "media": media,
            "evidence_advisories": evidence.missing_evidence(sections, media),
            "summary": scoring.summarise(assessment),
        }

    def list_assessments(self, actor: dict[str, Any], status: str | None = None) -> list[dict[str, Any]]:
        """Assessments visible to *actor*, newest first."""
        require_active(actor)
        assessments = self.store.list_assessments()
        if actor["role"] == Role.ASSESSOR.value:
            assessments = [a for a in assessments if a["user_id"] == actor["id"]]
        elif actor["role"] == Role.CLIENT.value:
            assessments = [a for a in assessments if a["client_id"] == actor["id"]]
        if status is not None:
            assessments = [a for a in assessments if a["status"] == status]
        return sorted(assessments, key=lambda a: a["id"], reverse=True)
