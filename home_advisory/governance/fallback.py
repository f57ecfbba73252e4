"""
Storage fault policy for cadence and acknowledgment stores.

Under fail-open a lost history reads as "nothing has fired yet". The policy
covers stored history only; the elevated-attention confidence gate reads no
storage and is never subject to it.
"""

import json
import logging
from enum import Enum
from typing import TypeVar

from pydantic import ValidationError

from home_advisory.storage.kv import StorageError

logger = logging.getLogger("home_advisory.governance")

T = TypeVar("T")

# What a broken store or a corrupt blob raises. Programming errors
# (TypeError, AttributeError and the like) are not storage faults.
STORAGE_FAULTS = (StorageError, OSError, json.JSONDecodeError, ValidationError)


class FallbackPolicy(str, Enum):
    FAIL_OPEN = "fail_open"      # log and continue with "no history"
    FAIL_CLOSED = "fail_closed"  # surface the fault to the caller


class StorageFault(Exception):
    """Raised under FAIL_CLOSED when persisted governance state is unusable."""
    pass


STORAGE_FALLBACK_POLICY = FallbackPolicy.FAIL_OPEN


def handle_storage_fault(error: Exception, operation: str, fallback: T) -> T:
    """The single place that decides what a storage fault turns into."""
    if STORAGE_FALLBACK_POLICY == FallbackPolicy.FAIL_CLOSED:
        raise StorageFault(f"{operation} failed: {error}") from error

    logger.warning(
        "Storage fault during %s (%s: %s); continuing with %r",
        operation, type(error).__name__, error, fallback,
    )
    return fallback
