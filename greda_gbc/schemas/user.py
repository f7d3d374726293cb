"""Schemas for user administration and invitation endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreate(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: str = Field(..., description="'admin', 'assessor' or 'client'")
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    subscription_tier: str = "free"
    organization_name: str | None = None
    phone_number: str | None = None


class UserStatusUpdate(BaseModel):
    status: str = Field(..., description="'active', 'suspended' or 'pending'")


class SubscriptionUpdate(BaseModel):
    subscription_tier: str | None = None
    subscription_status: str | None = None


class UserResponse(BaseModel):
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str
    status: str
    subscription_tier: str
    subscription_status: str
    organization_name: str | None = None
    created_at: datetime


class InvitationCreate(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: str = "client"
    subscription_tier: str = "free"
    organization_name: str | None = None


class InvitationResponse(BaseModel):
    email: str
    role: str
    subscription_tier: str
    status: str
    token: str
    expires_at: datetime


class InvitationAccept(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone_number: str | None = None
