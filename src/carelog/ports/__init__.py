"""Ports - interfaces/protocols for external dependencies."""

from .version_store import VersionStore
from .schedule_oracle import ScheduleOracle
from .outcome_store import OutcomeLog, OutcomeStore

__all__ = [
    "VersionStore",
    "ScheduleOracle",
    "OutcomeStore",
    "OutcomeLog",
]
