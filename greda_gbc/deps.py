"""FastAPI dependencies: caller identity and service wiring."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request, status

from greda_gbc.services.activity import ActivityRecorder
from greda_gbc.services.lifecycle import AssessmentService
from greda_gbc.services.users import UserService
from greda_gbc.store import data_store


def get_current_user(request: Request) -> dict[str, Any]:
    """Resolve the caller from the identity header set by the auth gateway."""
    header = request.app.state.settings.user_id_header
    user_id = request.headers.get(header)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {header} header",
        )
    user = data_store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return user


def get_recorder(request: Request) -> ActivityRecorder:
    return ActivityRecorder(data_store, request.app.state.notifier)


def get_assessment_service(
    request: Request,
    recorder: ActivityRecorder = Depends(get_recorder),
) -> AssessmentService:
    return AssessmentService(data_store, recorder, request.app.state.settings)


def get_user_service(
    request: Request,
    recorder: ActivityRecorder = Depends(get_recorder),
) -> UserService:
    return UserService(data_store, recorder, request.app.state.settings)
