"""Static section and variable catalog for building assessments.

The catalog is configuration, not runtime state: it is the ruleset the
scoring aggregator validates against and the UI renders from. Section order
is fixed and the scored variables add up to the certification ceiling.

The per-variable maxima and evidence flags are a rebalance chosen so the
eight sections total 130 points; they are not the weights of the earlier
assessment form, whose sections did not add up to the ceiling.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class SectionVariable:
    """A single scorable item within a section."""

    id: str
    name: str
    max_score: int
    requires_images: bool = False
    requires_videos: bool = False
    requires_audio: bool = False
    requires_location: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def required_evidence(self) -> list[str]:
        """Media types expected to back this variable's score."""
        kinds = []
        if self.requires_images:
            kinds.append("image")
        if self.requires_videos:
            kinds.append("video")
        if self.requires_audio:
            kinds.append("audio")
        return kinds


# Certification ceiling for a fully scored assessment
MAX_POSSIBLE_SCORE = 130

BUILDING_INFORMATION = "building-information"

# Ordered (section_type, display name)
SECTIONS: list[tuple[str, str]] = [
    (BUILDING_INFORMATION, "Building Information"),
    ("site-transport", "Site and Transport"),
    ("water-efficiency", "Water Efficiency"),
    ("energy-efficiency", "Energy Efficiency"),
    ("indoor-quality", "Indoor Environmental Quality"),
    ("materials-resources", "Materials & Resources"),
    ("waste-pollution", "Waste & Pollution"),
    ("innovation", "Innovation"),
]

SECTION_TYPES = [key for key, _ in SECTIONS]
SECTION_NAMES = dict(SECTIONS)
TOTAL_SECTIONS = len(SECTIONS)

SECTION_VARIABLES: dict[str, list[SectionVariable]] = {
    BUILDING_INFORMATION: [],
    "site-transport": [
        SectionVariable("protectRestoreHabitat", "Protect or Restore Habitat", 5, requires_images=True),
        SectionVariable("heatIslandReduction", "Heat Island Reduction", 4, requires_images=True),
        SectionVariable("landscapingPlanters", "Landscaping and Planters", 4, requires_images=True),
        SectionVariable("publicTransport", "Access to Public Transport", 5, requires_location=True),
        SectionVariable("cyclingWalking", "Facilities for Cycling or Walking", 4, requires_location=True),
    ],
    "water-efficiency": [
        SectionVariable("waterQuality", "Water Quality", 4, requires_images=True),
        SectionVariable("highEfficiencyFixtures", "High Efficiency Water Fixtures", 4, requires_images=True),
        SectionVariable("surfaceWaterManagement", "Surface Water Management", 3),
        SectionVariable("waterRecycling", "Water Recycling", 4, requires_videos=True),
        SectionVariable("meteringLeakDetection", "Metering/Leak Detection", 3),
    ],
    "energy-efficiency": [
        SectionVariable("solarPanels", "Solar Panels", 8, requires_images=True, requires_location=True),
        SectionVariable("renewableEnergy", "Renewable Energy Use", 6, requires_images=True),
        SectionVariable("energyEfficientEquipment", "Energy Efficient Equipment", 5, requires_images=True),
        SectionVariable("carbonEmissionReduction", "Carbon Emission Reduction", 7),
        SectionVariable("coldStorageEfficiency", "Cold Storage Efficiency", 3),
        SectionVariable("ventilationAcEfficiency", "Ventilation/AC Efficiency", 5, requires_videos=True),
    ],
    "indoor-quality": [
        SectionVariable("daylighting", "Daylighting", 4, requires_images=True),
        SectionVariable("indoorAirQuality", "Indoor Air Quality", 4),
        SectionVariable("naturalLightingSources", "Natural Lighting Sources", 3, requires_images=True),
        SectionVariable("acousticPerformance", "Acoustic Performance", 3, requires_audio=True),
    ],
    "materials-resources": [
        SectionVariable("recycledContentMaterials", "Recycled Content Materials", 4, requires_images=True),
        SectionVariable("lowEmbeddedEnergyMaterials", "Low Embedded Energy Materials", 4),
        SectionVariable("locallySourcedMaterials", "Locally Sourced Materials", 4, requires_location=True),
        SectionVariable("thirdPartyCertifiedMaterials", "Third-Party Certified Materials", 4),
    ],
    "waste-pollution": [
        SectionVariable("constructionWasteManagement", "Construction Waste Management", 5, requires_videos=True),
        SectionVariable("operationalWasteManagement", "Operational Waste Management", 4, requires_images=True),
        SectionVariable("pollutionControl", "Pollution Control", 3),
    ],
    "innovation": [
        SectionVariable("innovativeTechnologies", "Innovative Technologies", 6, requires_videos=True),
        SectionVariable("sustainableProducts", "Sustainable Products", 4),
        SectionVariable("ecoFriendlyDesigns", "Eco-Friendly Designs", 4, requires_images=True),
    ],
}

SECTION_MAX_SCORES: dict[str, int] = {
    key: sum(v.max_score for v in variables) for key, variables in SECTION_VARIABLES.items()
}
if sum(SECTION_MAX_SCORES.values()) != MAX_POSSIBLE_SCORE:
    raise RuntimeError(f"Catalog sums to {sum(SECTION_MAX_SCORES.values())}, expected {MAX_POSSIBLE_SCORE}")


def is_section_type(section_type: str) -> bool:
    return section_type in SECTION_VARIABLES


def get_variables(section_type: str) -> list[SectionVariable]:
    """Return the variable catalog for a section (empty for unknown keys)."""
    return SECTION_VARIABLES.get(section_type, [])


def get_variable(section_type: str, variable_id: str) -> SectionVariable | None:
    for variable in get_variables(section_type):
        if variable.id == variable_id:
            return variable
    return None


def catalog_as_dicts() -> list[dict[str, Any]]:
    """Serialisable catalog in section order."""
    return [
        {
            "section_type": key,
            "name": name,
            "max_score": SECTION_MAX_SCORES[key],
            "is_scored": bool(SECTION_VARIABLES[key]),
            "variables": [v.to_dict() for v in SECTION_VARIABLES[key]],
        }
        for key, name in SECTIONS
    ]
