"""
System Confidence Derivation — how well-documented are the home's systems?

This is system-level confidence (drives chat mode), not equity confidence.

Behavioral Contract:
- Pure: same records in, same bucket/coverage/lists out
- Malformed records degrade to absent fields; nothing is raised
- A stored confidence can raise a system's score, never lower it
"""

import logging
from typing import Any, Iterable, List, Mapping, Union

from pydantic import ValidationError

from home_advisory.models.chat_mode import SystemConfidence
from home_advisory.models.system import ConfidenceScores, SystemRecord

logger = logging.getLogger("home_advisory.confidence")

RecordLike = Union[SystemRecord, Mapping[str, Any]]

CRITICAL_SYSTEMS = ("hvac", "roof", "water_heater", "electrical")

BASE_SCORE = 0.10
INSTALL_DATE_BONUS = 0.30
MANUFACTURE_YEAR_BONUS = 0.25
PERMIT_SOURCE_BONUS = 0.25
USER_SOURCE_BONUS = 0.20

MODERATE_THRESHOLD = 0.40
HIGH_THRESHOLD = 0.70
LOW_CONFIDENCE_THRESHOLD = 0.40

USER_SOURCE_MARKERS = ("user", "manual", "owner")
USER_CONFIRMED_MARKERS = ("user", "manual", "owner_reported")


def _coerce_record(raw: RecordLike) -> SystemRecord:
    """Turn a record or loose mapping into a SystemRecord, dropping bad fields."""
    if isinstance(raw, SystemRecord):
        return raw
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring non-mapping system record: %r", raw)
        return SystemRecord()

    try:
        return SystemRecord.model_validate(dict(raw))
    except ValidationError as e:
        # Keep whatever fields validate on their own
        bad_fields = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.debug("Dropping malformed fields %s from system record", sorted(bad_fields))
        cleaned = {k: v for k, v in raw.items() if k not in bad_fields}
        try:
            return SystemRecord.model_validate(cleaned)
        except ValidationError:
            return SystemRecord()


def _sources(record: SystemRecord) -> List[str]:
    return [s.lower() for s in record.data_sources if isinstance(s, str)]


def _has_source(record: SystemRecord, markers: Iterable[str]) -> bool:
    return any(m in s for s in _sources(record) for m in markers)


def is_critical_system(system_key: str) -> bool:
    """
    'hvac_carrier_abc123' matches 'hvac'. Prefixes are matched against the
    whole critical key so that 'water_heater_ao_smith' matches 'water_heater'.
    """
    return any(
        system_key == critical or system_key.startswith(f"{critical}_")
        for critical in CRITICAL_SYSTEMS
    )


def _is_dated(record: SystemRecord) -> bool:
    return bool(record.install_date) or bool(record.manufacture_year)


def compute_individual_confidence(record: RecordLike) -> float:
    """
    Confidence for one system in [0, 1]:
      base 0.10, +0.30 install date, +0.25 manufacture year,
      +0.25 permit source, +0.20 user/manual/owner source,
      raised to the stored overall score if that is higher.
    """
    record = _coerce_record(record)
    score = BASE_SCORE

    if record.install_date:
        score += INSTALL_DATE_BONUS
    if record.manufacture_year:
        score += MANUFACTURE_YEAR_BONUS
    if _has_source(record, ("permit",)):
        score += PERMIT_SOURCE_BONUS
    if _has_source(record, USER_SOURCE_MARKERS):
        score += USER_SOURCE_BONUS

    stored = (record.confidence_scores or ConfidenceScores()).overall
    if stored and stored > score:
        score = stored

    return round(min(score, 1.0), 4)


def derive_system_confidence(systems: Iterable[RecordLike]) -> SystemConfidence:
    """Average confidence over critical systems, bucketed Early/Moderate/High."""
    records = [_coerce_record(s) for s in systems]
    critical = [r for r in records if is_critical_system(r.system_key)]

    if not critical:
        return SystemConfidence.EARLY

    average = round(
        sum(compute_individual_confidence(r) for r in critical) / len(critical), 4
    )

    if average < MODERATE_THRESHOLD:
        bucket = SystemConfidence.EARLY
    elif average < HIGH_THRESHOLD:
        bucket = SystemConfidence.MODERATE
    else:
        bucket = SystemConfidence.HIGH

    logger.debug(
        "System confidence %s (avg=%.4f over %d critical systems)",
        bucket.value, average, len(critical),
    )
    return bucket


def compute_critical_systems_coverage(systems: Iterable[RecordLike]) -> float:
    """
    Fraction of the four critical systems with an install date or
    manufacture year. Gates exit from baseline establishment.
    """
    covered = sum(
        1
        for r in (_coerce_record(s) for s in systems)
        if is_critical_system(r.system_key) and _is_dated(r)
    )
    return min(covered / len(CRITICAL_SYSTEMS), 1.0)


def has_user_confirmed_systems(systems: Iterable[RecordLike]) -> bool:
    """True if any system carries user, manual or owner-reported data."""
    return any(
        _has_source(_coerce_record(s), USER_CONFIRMED_MARKERS) for s in systems
    )


def has_permit_records(systems: Iterable[RecordLike]) -> bool:
    return any(_has_source(_coerce_record(s), ("permit",)) for s in systems)


def find_low_confidence_systems(systems: Iterable[RecordLike]) -> List[str]:
    """Keys of systems whose individual confidence is below 0.40."""
    return [
        r.system_key
        for r in (_coerce_record(s) for s in systems)
        if r.system_key and compute_individual_confidence(r) < LOW_CONFIDENCE_THRESHOLD
    ]
