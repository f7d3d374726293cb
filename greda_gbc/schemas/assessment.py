"""Schemas for assessment, section and catalog endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class BuildingMetadata(BaseModel):
    """Descriptive information captured when an assessment is started."""

    building_name: str | None = Field(default=None, max_length=255)
    client_name: str | None = Field(default=None, max_length=255)
    building_location: str | None = None
    digital_address: str | None = Field(default=None, max_length=50)
    phone_number: str | None = Field(default=None, max_length=50)
    additional_notes: str | None = None
    building_footprint: float | None = Field(default=None, ge=0)
    room_height: float | None = Field(default=None, ge=0)
    number_of_bedrooms: int | None = Field(default=None, ge=0)
    site_area: float | None = Field(default=None, ge=0)
    number_of_windows: int | None = Field(default=None, ge=0)
    number_of_doors: int | None = Field(default=None, ge=0)
    average_window_size: float | None = Field(default=None, ge=0)
    number_of_floors: int | None = Field(default=None, ge=0)
    total_green_area: float | None = Field(default=None, ge=0)


class AssessmentCreate(BaseModel):
    """Request to start a new draft assessment."""

    client_id: str
    building: BuildingMetadata = Field(default_factory=BuildingMetadata)


class Location(BaseModel):
    """Geocoordinate attached to a location-bearing variable."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str | None = None


class SectionUpsert(BaseModel):
    """Save (create or replace) one section's variable scores."""

    variables: dict[str, float] = Field(default_factory=dict)
    location_data: dict[str, Location | None] = Field(default_factory=dict)
    is_completed: bool = False
    expected_version: int | None = Field(default=None, ge=1)


class CompleteRequest(BaseModel):
    expected_version: int | None = Field(default=None, ge=1)


class LockRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class EditRequestCreate(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class DenyRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class MediaAttach(BaseModel):
    """Reference to an evidence file already stored by the media service."""

    section_type: str
    field_name: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    file_type: str = Field(..., description="'image', 'video', 'audio' or 'document'")
    file_path: str = Field(..., min_length=1)
    file_size: int | None = Field(default=None, ge=0)
    mime_type: str | None = None


class MediaResponse(BaseModel):
    id: int
    section_type: str
    field_name: str
    file_name: str
    file_type: str
    file_size: int | None = None
    file_path: str
    mime_type: str | None = None
    created_at: datetime


class SectionResponse(BaseModel):
    id: int
    section_type: str
    section_name: str
    score: float
    max_score: float
    is_completed: bool
    variables: dict[str, float]
    location_data: dict[str, Any]
    updated_at: datetime


class EditRequestResponse(BaseModel):
    requested_by: str
    requester_name: str
    reason: str
    requested_at: datetime


class AssessmentResponse(BaseModel):
    """Assessment record as returned to callers."""

    public_id: str
    user_id: str
    client_id: str
    status: str
    is_locked: bool
    locked_by: str | None = None
    locked_at: datetime | None = None
    building_name: str | None = None
    client_name: str | None = None
    building_location: str | None = None
    digital_address: str | None = None
    overall_score: float
    max_possible_score: float
    completed_sections: int
    total_sections: int
    assessor_name: str | None = None
    assessor_role: str | None = None
    conducted_at: datetime | None = None
    last_edited_by_name: str | None = None
    last_edited_at: datetime | None = None
    pending_edit_request: EditRequestResponse | None = None
    is_archived: bool
    version: int
    created_at: datetime
    updated_at: datetime


class RatingSummary(BaseModel):
    rating_tier: str
    rating_label: str
    star_rating: int = Field(..., ge=0, le=5)
    score_percentage: float = Field(..., ge=0.0, le=100.0)
    progress_stage: str


class EvidenceAdvisory(BaseModel):
    section_type: str
    variable_id: str
    variable_name: str
    missing: list[str]


class AssessmentDetailResponse(BaseModel):
    """Full assessment view with sections, evidence and rating."""

    assessment: AssessmentResponse
    sections: list[SectionResponse]
    media: list[MediaResponse]
    evidence_advisories: list[EvidenceAdvisory]
    summary: RatingSummary


class VariableDefinition(BaseModel):
    id: str
    name: str
    max_score: int
    requires_images: bool
    requires_videos: bool
    requires_audio: bool
    requires_location: bool


class SectionDefinition(BaseModel):
    section_type: str
    name: str
    max_score: int
    is_scored: bool
    variables: list[VariableDefinition]


class CatalogResponse(BaseModel):
    max_possible_score: int
    total_sections: int
    sections: list[SectionDefinition]


class RatingBand(BaseModel):
    min_score: float
    tier: str
    label: str
    stars: int


class RatingTableResponse(BaseModel):
    bands: list[RatingBand]
    score: float | None = None
    tier: str | None = None
