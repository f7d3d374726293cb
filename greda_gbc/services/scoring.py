"""Scoring aggregator: pure section and certification scoring.

No side effects; every function is deterministic and safe to call
repeatedly. Variable bounds are enforced when a section is written, so
section scores here are plain sums.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from greda_gbc.services.catalog import MAX_POSSIBLE_SCORE, SECTION_MAX_SCORES, TOTAL_SECTIONS


class RatingTier(str, Enum):
    FIVE_STAR = "5-star"
    FOUR_STAR = "4-star"
    THREE_STAR = "3-star"
    TWO_STAR = "2-star"
    ONE_STAR = "1-star"
    UNRATED = "Unrated"


class ProgressStage(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ALMOST_DONE = "almost_done"
    COMPLETE = "complete"


# Canonical certification table (score >= threshold), highest first
RATING_THRESHOLDS: list[tuple[float, RatingTier]] = [
    (106.0, RatingTier.FIVE_STAR),
    (80.0, RatingTier.FOUR_STAR),
    (60.0, RatingTier.THREE_STAR),
    (45.0, RatingTier.TWO_STAR),
    (1.0, RatingTier.ONE_STAR),
]

TIER_LABELS = {
    RatingTier.FIVE_STAR: "Diamond",
    RatingTier.FOUR_STAR: "4-Star Certified",
    RatingTier.THREE_STAR: "3-Star Certified",
    RatingTier.TWO_STAR: "2-Star Certified",
    RatingTier.ONE_STAR: "1-Star Certified",
    RatingTier.UNRATED: "Unrated",
}

TIER_STARS = {
    RatingTier.FIVE_STAR: 5,
    RatingTier.FOUR_STAR: 4,
    RatingTier.THREE_STAR: 3,
    RatingTier.TWO_STAR: 2,
    RatingTier.ONE_STAR: 1,
    RatingTier.UNRATED: 0,
}

# Sections remaining at or below which an assessment is "almost done"
ALMOST_DONE_REMAINING = 2


def compute_section_score(section_type: str, variables: dict[str, float]) -> float:
    """Sum of all submitted variable values for a section."""
    return float(sum(variables.values()))


def compute_section_max_score(section_type: str) -> float:
    """Sum of the catalog maxima for a section (0 for non-scored sections)."""
    return float(SECTION_MAX_SCORES.get(section_type, 0))


def compute_overall_score(sections: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Aggregate stored sections into the assessment's score fields."""
    overall = 0.0
    max_possible = 0.0
    completed = 0
    for section in sections:
        overall += section.get("score") or 0.0
        max_possible += section.get("max_score") or 0.0
        if section.get("is_completed"):
            completed += 1
    return {
        "overall_score": overall,
        "max_possible_score": max_possible,
        "completed_sections": completed,
    }


def rating_tier(overall_score: float) -> RatingTier:
    """Map an overall score to its certification tier."""
    for threshold, tier in RATING_THRESHOLDS:
        if overall_score >= threshold:
            return tier
    return RatingTier.UNRATED


def score_percentage(overall_score: float, ceiling: float = MAX_POSSIBLE_SCORE) -> float:
    """Overall score as a percentage of the certification ceiling."""
    if ceiling <= 0:
        return 0.0
    return round(min(overall_score, ceiling) / ceiling * 100, 1)


def progress_stage(completed_sections: int, total_sections: int = TOTAL_SECTIONS) -> ProgressStage:
    """View projection of how far along an assessment is. Not persisted."""
    if completed_sections <= 0:
        return ProgressStage.NOT_STARTED
    if completed_sections >= total_sections:
        return ProgressStage.COMPLETE
    if total_sections - completed_sections <= ALMOST_DONE_REMAINING:
        return ProgressStage.ALMOST_DONE
    return ProgressStage.IN_PROGRESS


def summarise(assessment: dict[str, Any]) -> dict[str, Any]:
    """Rating summary for an assessment record."""
    tier = rating_tier(assessment.get("overall_score") or 0.0)
    return {
        "rating_tier": tier.value,
        "rating_label": TIER_LABELS[tier],
        "star_rating": TIER_STARS[tier],
        "score_percentage": score_percentage(assessment.get("overall_score") or 0.0),
        "progress_stage": progress_stage(
            assessment.get("completed_sections") or 0,
            assessment.get("total_sections") or TOTAL_SECTIONS,
        ).value,
    }
