"""Read-only catalog endpoints: sections, variables and the rating table."""

from __future__ import annotations

from fastapi import APIRouter, Query

from greda_gbc.schemas.assessment import CatalogResponse, RatingBand, RatingTableResponse
from greda_gbc.services import catalog, scoring

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/sections", response_model=CatalogResponse)
async def get_sections() -> CatalogResponse:
    """Ordered section catalog with each variable's ceiling and evidence needs."""
    return CatalogResponse(
        max_possible_score=catalog.MAX_POSSIBLE_SCORE,
        total_sections=catalog.TOTAL_SECTIONS,
        sections=catalog.catalog_as_dicts(),
    )


@router.get("/rating", response_model=RatingTableResponse)
async def get_rating_table(
    score: float | None = Query(default=None, ge=0, le=catalog.MAX_POSSIBLE_SCORE),
) -> RatingTableResponse:
    """Certification bands; pass ``score`` to look up its tier."""
    bands = [
        RatingBand(
            min_score=threshold,
            tier=tier.value,
            label=scoring.TIER_LABELS[tier],
            stars=scoring.TIER_STARS[tier],
        )
        for threshold, tier in scoring.RATING_THRESHOLDS
    ]
    tier = scoring.rating_tier(score).value if score is not None else None
    return RatingTableResponse(bands=bands, score=score, tier=tier)
