"""Assessment lifecycle API endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from greda_gbc.deps import get_assessment_service, get_current_user
from greda_gbc.schemas.assessment import (
    AssessmentCreate,
    AssessmentDetailResponse,
    AssessmentResponse,
    CompleteRequest,
    DenyRequest,
    EditRequestCreate,
    EditRequestResponse,
    LockRequest,
    MediaAttach,
    MediaResponse,
    SectionResponse,
    SectionUpsert,
)
from greda_gbc.services.lifecycle import AssessmentService

router = APIRouter(prefix="/assessments", tags=["assessments"])


@router.post("", response_model=AssessmentResponse, status_code=201)
async def create_assessment(
    payload: AssessmentCreate,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    """Start a new draft assessment for a client."""
    assessment = service.create_assessment(
        user,
        payload.client_id,
        payload.building.model_dump(exclude_none=True),
    )
    return AssessmentResponse(**assessment)


@router.get("", response_model=list[AssessmentResponse])
async def list_assessments(
    status: str | None = Query(default=None, pattern=r"^(draft|completed)$"),
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> list[AssessmentResponse]:
    """Assessments visible to the caller."""
    return [AssessmentResponse(**a) for a in service.list_assessments(user, status=status)]


@router.get("/{public_id}", response_model=AssessmentDetailResponse)
async def get_assessment(
    public_id: str,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Full assessment with sections, media references and rating summary."""
    return AssessmentDetailResponse(**service.get_assessment(public_id, user))


@router.put("/{public_id}/sections/{section_type}", response_model=SectionResponse)
async def upsert_section(
    public_id: str,
    section_type: str,
    payload: SectionUpsert,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> SectionResponse:
    """Create or replace a section; scores are recomputed in the same step."""
    section = service.upsert_section(
        public_id,
        user,
        section_type,
        variables=payload.variables,
        location_data={
            key: location.model_dump() if location else None
            for key, location in payload.location_data.items()
        },
        is_completed=payload.is_completed,
        expected_version=payload.expected_version,
    )
    return SectionResponse(**section)


@router.post("/{public_id}/media", response_model=MediaResponse, status_code=201)
async def attach_media(
    public_id: str,
    payload: MediaAttach,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> MediaResponse:
    """Attach a reference to an uploaded evidence file."""
    media = service.attach_media(public_id, user, **payload.model_dump())
    return MediaResponse(**media)


@router.post("/{public_id}/complete", response_model=AssessmentResponse)
async def complete_assessment(
    public_id: str,
    payload: CompleteRequest | None = None,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    expected = payload.expected_version if payload else None
    return AssessmentResponse(**service.complete_assessment(public_id, user, expected_version=expected))


@router.post("/{public_id}/lock", response_model=AssessmentResponse)
async def lock_assessment(
    public_id: str,
    payload: LockRequest | None = None,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    """Admin only."""
    reason = payload.reason if payload else None
    return AssessmentResponse(**service.lock(public_id, user, reason=reason))


@router.post("/{public_id}/unlock", response_model=AssessmentResponse)
async def unlock_assessment(
    public_id: str,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    """Admin only."""
    return AssessmentResponse(**service.unlock(public_id, user))


@router.post("/{public_id}/request-edit", response_model=EditRequestResponse, status_code=202)
async def request_edit(
    public_id: str,
    payload: EditRequestCreate | None = None,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> EditRequestResponse:
    """Ask an administrator to unlock a completed assessment."""
    reason = payload.reason if payload else None
    return EditRequestResponse(**service.request_edit(public_id, user, reason))


@router.post("/{public_id}/edit-request/approve", response_model=AssessmentResponse)
async def approve_edit(
    public_id: str,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    return AssessmentResponse(**service.approve_edit(public_id, user))


@router.post("/{public_id}/edit-request/deny", response_model=AssessmentResponse)
async def deny_edit(
    public_id: str,
    payload: DenyRequest | None = None,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    reason = payload.reason if payload else None
    return AssessmentResponse(**service.deny_edit(public_id, user, reason))


@router.post("/{public_id}/archive", response_model=AssessmentResponse)
async def archive_assessment(
    public_id: str,
    user: dict[str, Any] = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentResponse:
    return AssessmentResponse(**service.archive_assessment(public_id, user))
