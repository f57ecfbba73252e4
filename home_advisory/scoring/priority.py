"""
Priority Scoring Engine — selects the single "primary focus" system.

    PriorityScore = FailureProbability12mo × ReplacementCostMidpoint × UrgencyMultiplier

Behavioral Contract:
- The formula is frozen; no ad-hoc adjustments
- Consumes a failure probability, never remaining years directly
- Ranking is total and deterministic: identical inputs give identical order
- Every scored system carries a plain-language explanation
- Never raises on missing data; an empty system list has no primary
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from home_advisory.models.scoring import (
    ClimateRisk,
    PrimarySystemSelection,
    PriorityScoreResult,
    ScoredSystem,
    Season,
)
from home_advisory.models.system import SystemTimelineEntry
from home_advisory.scoring.failure_probability import (
    UNKNOWN_REMAINING_PROBABILITY,
    FailureProbabilityModel,
    compute_failure_probability_12mo,
    get_remaining_years,
)

logger = logging.getLogger("home_advisory.scoring")

# HVAC: +25% in peak seasons. Roof: weather exposure by climate zone.
# Systems without an entry carry no multiplier.
URGENCY_MULTIPLIERS: Dict[str, Dict[str, Dict[str, float]]] = {
    "hvac": {
        "seasonal": {
            Season.SUMMER.value: 1.25,
            Season.WINTER.value: 1.25,
            Season.SPRING.value: 1.0,
            Season.FALL.value: 1.0,
        },
    },
    "roof": {
        "climate": {
            ClimateRisk.HURRICANE_ZONE.value: 1.35,
            ClimateRisk.FREEZE_ZONE.value: 1.15,
            ClimateRisk.TEMPERATE.value: 1.0,
        },
    },
    "water_heater": {},
}

REPLACEMENT_COST_MIDPOINTS: Dict[str, float] = {
    "hvac": 9000,           # (6000 + 12000) / 2
    "roof": 16500,          # (8000 + 25000) / 2
    "water_heater": 2350,   # (1200 + 3500) / 2
}
DEFAULT_REPLACEMENT_COST_MIDPOINT = 5000

SYSTEM_NAMES: Dict[str, str] = {
    "hvac": "HVAC",
    "roof": "roof",
    "water_heater": "water heater",
}


def get_current_season(current_time: Optional[datetime] = None) -> Season:
    """Meteorological season for the given date."""
    if current_time is None:
        current_time = datetime.now(timezone.utc)

    month = current_time.month
    if 3 <= month <= 5:
        return Season.SPRING
    if 6 <= month <= 8:
        return Season.SUMMER
    if 9 <= month <= 11:
        return Season.FALL
    return Season.WINTER


def get_replacement_cost_midpoint(system_id: str) -> float:
    return REPLACEMENT_COST_MIDPOINTS.get(system_id, DEFAULT_REPLACEMENT_COST_MIDPOINT)


def get_urgency_multiplier(
    system_id: str,
    season: Season,
    climate_risk: Optional[ClimateRisk] = None,
) -> float:
    """Seasonal multiplier first (HVAC), then climate (roof), else 1.0."""
    config = URGENCY_MULTIPLIERS.get(system_id)
    if not config:
        return 1.0

    seasonal = config.get("seasonal", {})
    if season.value in seasonal:
        return seasonal[season.value]

    climate = config.get("climate", {})
    if climate_risk is not None and climate_risk.value in climate:
        return climate[climate_risk.value]

    return 1.0


def _system_name(system_id: str) -> str:
    return SYSTEM_NAMES.get(system_id, system_id.replace("_", " "))


def _generate_explanation(
    system_id: str,
    failure_probability: float,
    urgency_multiplier: float,
    season: Season,
) -> str:
    name = _system_name(system_id)

    if failure_probability >= 0.5:
        return f"Your {name} is in its typical replacement window."

    if failure_probability >= 0.2 and urgency_multiplier > 1.0:
        if system_id == "hvac":
            reason = f"{season.value} is a high-demand season"
        else:
            reason = "weather conditions increase urgency"
        return f"Your {name} is approaching replacement age, and {reason}."

    if failure_probability >= 0.2:
        return f"Your {name} is approaching typical replacement age."

    return f"Your {name} is worth monitoring as the next system to plan for."


def calculate_priority_score(
    system_id: str,
    failure_probability_12mo: float,
    replacement_cost_midpoint: float,
    season: Season,
    climate_risk: Optional[ClimateRisk] = None,
) -> PriorityScoreResult:
    """Score a single system with the frozen formula."""
    urgency_multiplier = get_urgency_multiplier(system_id, season, climate_risk)
    score = failure_probability_12mo * replacement_cost_midpoint * urgency_multiplier

    return PriorityScoreResult(
        score=score,
        urgency_multiplier=urgency_multiplier,
        explanation=_generate_explanation(
            system_id, failure_probability_12mo, urgency_multiplier, season
        ),
    )


def _ranking_key(scored: ScoredSystem) -> tuple:
    """
    Tie-breaking order:
      1. higher score
      2. higher replacement cost midpoint
      3. higher failure probability
      4. smaller system_id
    """
    return (
        -scored.score,
        -scored.replacement_cost_midpoint,
        -scored.failure_probability,
        scored.system.system_id,
    )


def score_system(
    system: SystemTimelineEntry,
    season: Season,
    current_year: int,
    climate_risk: Optional[ClimateRisk] = None,
    failure_model: FailureProbabilityModel = compute_failure_probability_12mo,
) -> ScoredSystem:
    remaining_years = get_remaining_years(system.likely_replacement_year, current_year)
    if remaining_years is None:
        failure_probability = UNKNOWN_REMAINING_PROBABILITY
    else:
        failure_probability = failure_model(remaining_years, system.system_id)

    cost_mid = get_replacement_cost_midpoint(system.system_id)
    result = calculate_priority_score(
        system_id=system.system_id,
        failure_probability_12mo=failure_probability,
        replacement_cost_midpoint=cost_mid,
        season=season,
        climate_risk=climate_risk,
    )

    return ScoredSystem(
        system=system,
        score=result.score,
        urgency_multiplier=result.urgency_multiplier,
        failure_probability=failure_probability,
        replacement_cost_midpoint=cost_mid,
        explanation=result.explanation,
    )


def select_primary_system(
    systems: List[SystemTimelineEntry],
    climate_risk: Optional[ClimateRisk] = None,
    current_time: Optional[datetime] = None,
    failure_model: FailureProbabilityModel = compute_failure_probability_12mo,
) -> PrimarySystemSelection:
    """
    Score every system and pick the primary focus.

    Season and current year are taken from current_time (default: now).
    """
    if not systems:
        return PrimarySystemSelection(primary=None, scored=[])

    if current_time is None:
        current_time = datetime.now(timezone.utc)
    if climate_risk is not None:
        climate_risk = ClimateRisk(climate_risk)

    season = get_current_season(current_time)
    scored = sorted(
        (
            score_system(s, season, current_time.year, climate_risk, failure_model)
            for s in systems
        ),
        key=_ranking_key,
    )

    primary = scored[0]
    logger.debug(
        "Primary system %s (score=%.2f, season=%s, climate=%s) out of %d",
        primary.system.system_id,
        primary.score,
        season.value,
        climate_risk.value if climate_risk else None,
        len(scored),
    )
    return PrimarySystemSelection(primary=primary, scored=scored)
