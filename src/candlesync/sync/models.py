"""Result types for a single sync cycle."""

from dataclasses import dataclass
from enum import Enum


class CycleState(str, Enum):
    """Terminal state of one poll cycle."""

    UP_TO_DATE = "up_to_date"
    SYNCED = "synced"
    FAILED = "failed"


@dataclass
class CycleResult:
    """What one poll cycle saw and did.

    ``local_max`` is None for an empty series. ``error`` is set only for
    FAILED cycles.
    """

    state: CycleState
    remote_latest: int | None = None
    local_max: int | None = None
    fetched: int = 0
    inserted: int = 0
    duplicates: int = 0
    error: str | None = None
