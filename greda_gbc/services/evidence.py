"""Evidence references and advisory checks for scored variables.

Evidence is advisory: a variable flagged as needing photos, video, audio or
a location can still be scored without it. These helpers only report what
is missing so reviewers can follow up.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

from greda_gbc.errors import ValidationError
from greda_gbc.services.catalog import get_variable, get_variables

FILE_TYPES = ("image", "video", "audio", "document")


def validate_location(variable_id: str, location: Any) -> dict[str, Any] | None:
    """Check a {lat, lng, address} payload for a location-bearing variable."""
    if location is None:
        return None
    if not isinstance(location, dict):
        raise ValidationError(f"Location for '{variable_id}' must be an object", variable=variable_id)
    lat, lng = location.get("lat"), location.get("lng")
    for label, value, bound in (("lat", lat, 90), ("lng", lng, 180)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValidationError(f"Location {label} for '{variable_id}' must be a number", variable=variable_id)
        if abs(value) > bound:
            raise ValidationError(
                f"Location {label} for '{variable_id}' out of range", variable=variable_id, value=value
            )
    return {"lat": float(lat), "lng": float(lng), "address": location.get("address")}


def build_media_record(
    assessment_id: int,
    section_type: str,
    field_name: str,
    file_name: str,
    file_type: str,
    file_path: str,
    file_size: int | None = None,
    mime_type: str | None = None,
) -> dict[str, Any]:
    """Validate and assemble an evidence reference (the file itself lives elsewhere)."""
    if file_type not in FILE_TYPES:
        raise ValidationError(f"Unsupported file type '{file_type}'", allowed=list(FILE_TYPES))
    if not field_name:
        raise ValidationError("Field name is required")
    if get_variables(section_type) and get_variable(section_type, field_name) is None:
        raise ValidationError(
            f"Unknown variable '{field_name}' for section '{section_type}'",
            section_type=section_type,
            field_name=field_name,
        )
    if file_size is not None and file_size < 0:
        raise ValidationError("File size cannot be negative", file_size=file_size)
    return {
        "assessment_id": assessment_id,
        "section_type": section_type,
        "field_name": field_name,
        "file_name": file_name,
        "file_type": file_type,
        "file_size": file_size,
        "file_path": file_path,
        "mime_type": mime_type,
    }


def missing_evidence(
    sections: Iterable[dict[str, Any]],
    media: Iterable[dict[str, Any]],
) -> list[dict[str, Any]]:
    """List scored variables whose flagged evidence has not been supplied."""
    supplied: dict[tuple[str, str], set[str]] = {}
    for item in media:
        supplied.setdefault((item["section_type"], item["field_name"]), set()).add(item["file_type"])

    advisories = []
    for section in sections:
        section_type = section["section_type"]
        locations = section.get("location_data") or {}
        for variable_id, value in (section.get("variables") or {}).items():
            variable = get_variable(section_type, variable_id)
            if variable is None or not value:
                continue
            have = supplied.get((section_type, variable_id), set())
            missing = [kind for kind in variable.required_evidence if kind not in have]
            if variable.requires_location and not locations.get(variable_id):
                missing.append("location")
            if missing:
                advisories.append({
                    "section_type": section_type,
                    "variable_id": variable_id,
                    "variable_name": variable.name,
                    "missing": missing,
                })
    return advisories
