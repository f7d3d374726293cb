"""User administration and invitation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from greda_gbc.deps import get_current_user, get_user_service
from greda_gbc.schemas.user import (
    InvitationAccept,
    InvitationCreate,
    InvitationResponse,
    SubscriptionUpdate,
    UserCreate,
    UserResponse,
    UserStatusUpdate,
)
from greda_gbc.services.users import UserService

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    payload: UserCreate,
    admin: dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Admin-only direct account creation."""
    profile = payload.model_dump(exclude={"email", "role"})
    return UserResponse(**service.create_user(admin, payload.email, payload.role, **profile))


@router.get("/users/me", response_model=UserResponse)
async def current_user(user: dict[str, Any] = Depends(get_current_user)) -> UserResponse:
    return UserResponse(**user)


@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    admin: dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse(**service.update_user_status(admin, user_id, payload.status))


@router.patch("/users/{user_id}/subscription", response_model=UserResponse)
async def update_subscription(
    user_id: str,
    payload: SubscriptionUpdate,
    admin: dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = service.update_subscription(
        admin,
        user_id,
        subscription_tier=payload.subscription_tier,
        subscription_status=payload.subscription_status,
    )
    return UserResponse(**user)


@router.post("/invitations", response_model=InvitationResponse, status_code=201)
async def create_invitation(
    payload: InvitationCreate,
    admin: dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> InvitationResponse:
    """Invite a new user; the token is delivered out of band."""
    return InvitationResponse(**service.create_invitation(admin, **payload.model_dump()))


@router.post("/invitations/{token}/accept", response_model=UserResponse, status_code=201)
async def accept_invitation(
    token: str,
    payload: InvitationAccept,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Public endpoint: the invitation token is the credential."""
    return UserResponse(**service.accept_invitation(token, **payload.model_dump()))
