"""Tests for the section catalog and the pure scoring functions.

Covers: catalog totals and ordering, section and overall aggregation,
rating tier boundaries, percentage and progress projections.
"""

import inspect

import pytest

from greda_gbc.services import catalog, scoring
from greda_gbc.services.scoring import ProgressStage, RatingTier


# ─── Catalog ────────────────────────────────────────────────────────────────

class TestCatalog:
    """The static ruleset the aggregator validates against."""

    def test_scored_sections_sum_to_ceiling(self):
        assert sum(catalog.SECTION_MAX_SCORES.values()) == catalog.MAX_POSSIBLE_SCORE == 130

    def test_unbalanced_catalog_refuses_to_load(self):
        source = inspect.getsource(catalog).replace("MAX_POSSIBLE_SCORE = 130", "MAX_POSSIBLE_SCORE = 131")
        with pytest.raises(RuntimeError, match="expected 131"):
            exec(compile(source, "catalog_variant", "exec"), {"__name__": "catalog_variant"})

    def test_energy_efficiency_maximum(self):
        assert catalog.SECTION_MAX_SCORES["energy-efficiency"] == 34

    def test_eight_sections_in_fixed_order(self):
        assert catalog.TOTAL_SECTIONS == 8
        assert catalog.SECTION_TYPES[0] == "building-information"
        assert catalog.SECTION_TYPES[-1] == "innovation"

    def test_building_information_is_not_scored(self):
        assert catalog.get_variables("building-information") == []
        assert catalog.SECTION_MAX_SCORES["building-information"] == 0

    def test_variable_ids_unique_within_section(self):
        for section_type, variables in catalog.SECTION_VARIABLES.items():
            ids = [v.id for v in variables]
            assert len(ids) == len(set(ids)), section_type

    def test_get_variable_lookup(self):
        variable = catalog.get_variable("energy-efficiency", "solarPanels")
        assert variable is not None
        assert variable.max_score == 8
        assert variable.requires_location is True
        assert catalog.get_variable("energy-efficiency", "nope") is None

    def test_unknown_section_has_no_variables(self):
        assert catalog.is_section_type("rooftop-garden") is False
        assert catalog.get_variables("rooftop-garden") == []

    def test_required_evidence_lists_media_kinds(self):
        variable = catalog.get_variable("indoor-quality", "acousticPerformance")
        assert variable.required_evidence == ["audio"]

    def test_catalog_as_dicts_is_serialisable(self):
        sections = catalog.catalog_as_dicts()
        assert [s["section_type"] for s in sections] == catalog.SECTION_TYPES
        energy = next(s for s in sections if s["section_type"] == "energy-efficiency")
        assert energy["is_scored"] is True
        assert energy["max_score"] == 34
        assert {"id", "name", "max_score", "requires_images"} <= set(energy["variables"][0])


# ─── Section and overall aggregation ────────────────────────────────────────

class TestAggregation:
    """Section score sums and assessment-level totals."""

    def test_section_score_is_sum_of_values(self):
        assert scoring.compute_section_score("water-efficiency", {"waterQuality": 3, "waterRecycling": 2.5}) == 5.5

    def test_empty_section_scores_zero(self):
        assert scoring.compute_section_score("innovation", {}) == 0.0

    def test_section_max_is_catalog_sum(self):
        assert scoring.compute_section_max_score("site-transport") == 22.0
        assert scoring.compute_section_max_score("building-information") == 0.0

    def test_overall_sums_only_stored_sections(self):
        sections = [
            {"section_type": "energy-efficiency", "score": 10.0, "max_score": 34.0, "is_completed": True},
            {"section_type": "innovation", "score": 4.0, "max_score": 14.0, "is_completed": False},
        ]
        totals = scoring.compute_overall_score(sections)
        assert totals == {"overall_score": 14.0, "max_possible_score": 48.0, "completed_sections": 1}

    def test_overall_of_nothing_is_zero(self):
        assert scoring.compute_overall_score([]) == {
            "overall_score": 0.0,
            "max_possible_score": 0.0,
            "completed_sections": 0,
        }


# ─── Rating tiers ───────────────────────────────────────────────────────────

class TestRatingTier:
    """Certification bands: 1 / 45 / 60 / 80 / 106."""

    @pytest.mark.parametrize("score,tier", [
        (0, RatingTier.UNRATED),
        (0.5, RatingTier.UNRATED),
        (1, RatingTier.ONE_STAR),
        (44.9, RatingTier.ONE_STAR),
        (45, RatingTier.TWO_STAR),
        (60, RatingTier.THREE_STAR),
        (79.99, RatingTier.THREE_STAR),
        (80, RatingTier.FOUR_STAR),
        (82, RatingTier.FOUR_STAR),
        (105.9, RatingTier.FOUR_STAR),
        (106, RatingTier.FIVE_STAR),
        (130, RatingTier.FIVE_STAR),
    ])
    def test_band_boundaries(self, score, tier):
        assert scoring.rating_tier(score) is tier

    def test_eighty_two_is_four_star(self):
        assert scoring.rating_tier(82).value == "4-star"

    def test_tier_never_decreases_as_score_rises(self):
        order = [RatingTier.UNRATED, RatingTier.ONE_STAR, RatingTier.TWO_STAR,
                 RatingTier.THREE_STAR, RatingTier.FOUR_STAR, RatingTier.FIVE_STAR]
        previous = 0
        for tenth in range(0, 1301):
            rank = order.index(scoring.rating_tier(tenth / 10))
            assert rank >= previous
            previous = rank

    def test_five_star_label_is_diamond(self):
        assert scoring.TIER_LABELS[RatingTier.FIVE_STAR] == "Diamond"


# ─── Projections ────────────────────────────────────────────────────────────

class TestProjections:
    """Percentage and progress stage views."""

    def test_percentage_of_ceiling(self):
        assert scoring.score_percentage(65) == 50.0
        assert scoring.score_percentage(0) == 0.0

    def test_percentage_capped_at_hundred(self):
        assert scoring.score_percentage(200) == 100.0

    @pytest.mark.parametrize("completed,stage", [
        (0, ProgressStage.NOT_STARTED),
        (1, ProgressStage.IN_PROGRESS),
        (5, ProgressStage.IN_PROGRESS),
        (6, ProgressStage.ALMOST_DONE),
        (7, ProgressStage.ALMOST_DONE),
        (8, ProgressStage.COMPLETE),
    ])
    def test_progress_stage(self, completed, stage):
        assert scoring.progress_stage(completed, 8) is stage

    def test_summarise(self):
        summary = scoring.summarise({"overall_score": 82.0, "completed_sections": 8, "total_sections": 8})
        assert summary == {
            "rating_tier": "4-star",
            "rating_label": "4-Star Certified",
            "star_rating": 4,
            "score_percentage": 63.1,
            "progress_stage": "complete",
        }
