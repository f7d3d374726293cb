"""Assessment models: building evaluations, their sections and evidence."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from greda_gbc.models.base import Base, IntegerPKMixin, TimestampMixin


class Assessment(IntegerPKMixin, TimestampMixin, Base):
    """A building sustainability assessment conducted by an assessor for a client."""

    __tablename__ = "assessments"

    public_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    locked_by: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Building metadata
    building_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    building_location: Mapped[str | None] = mapped_column(Text, nullable=True)
    digital_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    additional_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    building_footprint: Mapped[float | None] = mapped_column(Float, nullable=True)  # m²
    room_height: Mapped[float | None] = mapped_column(Float, nullable=True)  # m
    number_of_bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    site_area: Mapped[float | None] = mapped_column(Float, nullable=True)  # m²
    number_of_windows: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_doors: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_window_size: Mapped[float | None] = mapped_column(Float, nullable=True)  # m²
    number_of_floors: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_green_area: Mapped[float | None] = mapped_column(Float, nullable=True)  # m²

    # Aggregated scores (maintained by the scoring aggregator)
    overall_score: Mapped[float] = mapped_column(Float, default=0.0)
    max_possible_score: Mapped[float] = mapped_column(Float, default=0.0)
    completed_sections: Mapped[int] = mapped_column(Integer, default=0)
    total_sections: Mapped[int] = mapped_column(Integer, default=8)

    assessor_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    assessor_role: Mapped[str | None] = mapped_column(String(20), nullable=True)
    conducted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Edit tracking
    last_edited_by: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    last_edited_by_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    pending_edit_request: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Archive status
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    archived_by: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Assessment {self.public_id[:8]} status={self.status}>"


class AssessmentSection(IntegerPKMixin, TimestampMixin, Base):
    """Scores for one section of an assessment. One row per (assessment, section)."""

    __tablename__ = "assessment_sections"
    __table_args__ = (
        UniqueConstraint("assessment_id", "section_type", name="assessment_section_unique"),
    )

    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    section_type: Mapped[str] = mapped_column(String(50), nullable=False)
    section_name: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[float] = mapped_column(Float, default=0.0)
    max_score: Mapped[float] = mapped_column(Float, default=0.0)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    variables: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    location_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<AssessmentSection {self.section_type} score={self.score}>"


class AssessmentMedia(IntegerPKMixin, Base):
    """Reference to an uploaded evidence file for an assessment field."""

    __tablename__ = "assessment_media"

    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    section_type: Mapped[str] = mapped_column(String(50), nullable=False)
    field_name: Mapped[str] = mapped_column(String(100), nullable=False)
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(String(20), nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<AssessmentMedia {self.section_type}/{self.field_name} {self.file_type}>"
