"""Domain error taxonomy for the assessment core.

Every error carries a machine-readable ``code`` and a ``details`` dict so the
HTTP layer can render a message the client can act on (for example, offering
an edit request when an assessment is locked).
"""

from __future__ import annotations

from typing import Any


class AssessmentError(Exception):
    """Base class for all domain errors raised by the core."""

    status_code = 400
    code = "assessment_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class ValidationError(AssessmentError):
    """Malformed section, variable or metadata input."""

    status_code = 422
    code = "validation_error"


class PermissionDeniedError(AssessmentError):
    """Role, ownership or account-status violation."""

    status_code = 403
    code = "permission_denied"


class AssessmentLockedError(PermissionDeniedError):
    """Write attempted against a locked assessment by a non-admin."""

    status_code = 423
    code = "assessment_locked"


class NotFoundError(AssessmentError):
    """Unresolvable identifier or cross-tenant access."""

    status_code = 404
    code = "not_found"


class ConflictError(AssessmentError):
    """Stale write or a transition that conflicts with current state."""

    status_code = 409
    code = "conflict"
