"""Home system records and per-system live state."""

from datetime import date
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class ConfidenceScores(BaseModel):
    """Stored confidence written by the enrichment layer."""

    overall: Optional[float] = None


class SystemRecord(BaseModel):
    """A raw home system record as provided by the storage layer."""

    system_key: str = ""                    # e.g., "hvac", "hvac_carrier_abc123"
    install_date: Optional[Union[date, str]] = None
    manufacture_year: Optional[int] = None
    data_sources: List[str] = []            # provenance tags: "permit", "user", ...
    confidence_scores: Optional[ConfidenceScores] = None


class SystemTimelineEntry(BaseModel):
    """A system on the capital timeline, as consumed by priority scoring."""

    system_id: str                          # "hvac" | "roof" | "water_heater" | ...
    likely_replacement_year: Optional[int] = None
    display_name: Optional[str] = None
    replacement_cost_low: Optional[float] = None
    replacement_cost_high: Optional[float] = None


class SystemState(str, Enum):
    """Each system is in exactly one state."""
    STABLE = "stable"
    PLANNING_WINDOW = "planning_window"          # aging into replacement window (time only)
    ELEVATED = "elevated"                        # deviation detected, not just time
    BASELINE_INCOMPLETE = "baseline_incomplete"  # confidence below threshold


class SystemModeInput(BaseModel):
    """Live state of one system, as seen by the chat mode selector."""

    key: str
    state: SystemState = SystemState.STABLE
    confidence: float = Field(ge=0.0, le=1.0, default=0.5)
    months_remaining: Optional[float] = None
    deviation_detected: bool = False
    anomaly_flags: List[str] = []           # e.g., ["unusual_runtime", "efficiency_drop"]
