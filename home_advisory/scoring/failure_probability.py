"""
Failure Probability Model — remaining lifespan to 12-month failure probability.

The priority scorer consumes this as a black box; any callable with the same
signature can be passed in its place. The default curve is an exponential
decay calibrated per system type:

  - at 0 remaining years: ~90% of the system's maximum probability
  - at 5 remaining years: roughly 0.15
  - at 10+ remaining years: the system's baseline maintenance failure rate
"""

import math
from typing import Callable, Dict, Optional

FailureProbabilityModel = Callable[[Optional[float], str], float]

# Probability used when remaining years cannot be computed
UNKNOWN_REMAINING_PROBABILITY = 0.1

# decay_rate: higher = faster probability increase near end of life
# min/max: baseline failure rate and overconfidence cap
SYSTEM_CALIBRATION: Dict[str, Dict[str, float]] = {
    "hvac": {"decay_rate": 0.35, "min_probability": 0.03, "max_probability": 0.85},
    "roof": {"decay_rate": 0.25, "min_probability": 0.02, "max_probability": 0.70},
    "water_heater": {"decay_rate": 0.40, "min_probability": 0.03, "max_probability": 0.90},
}


def compute_failure_probability_12mo(
    remaining_years: Optional[float], system_id: str
) -> float:
    """
    Probability in [0, 1] that the system fails within the next 12 months.

    remaining_years may be negative (past expected end of life). Unknown
    system types use the HVAC calibration.
    """
    if remaining_years is None:
        return UNKNOWN_REMAINING_PROBABILITY

    calibration = SYSTEM_CALIBRATION.get(system_id, SYSTEM_CALIBRATION["hvac"])
    decay_rate = calibration["decay_rate"]
    min_p = calibration["min_probability"]
    max_p = calibration["max_probability"]

    if remaining_years <= 0:
        # 90% of max at end of life, reaching max five years past it
        past_eol_factor = min(1.0, 0.9 + abs(remaining_years) * 0.02)
        return max_p * past_eol_factor

    if remaining_years >= 10:
        return min_p

    raw = max_p * math.exp(-decay_rate * remaining_years)
    return max(min_p, min(max_p, raw))


def get_remaining_years(
    likely_replacement_year: Optional[int], current_year: int
) -> Optional[float]:
    """Years until the likely (p50) replacement year; negative if past it."""
    if not likely_replacement_year:
        return None
    return float(likely_replacement_year - current_year)


def get_failure_probability_tier(probability: float) -> str:
    """Descriptive tier for display: low | moderate | high | critical."""
    if probability < 0.10:
        return "low"
    if probability < 0.30:
        return "moderate"
    if probability < 0.60:
        return "high"
    return "critical"
