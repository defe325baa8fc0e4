"""Schedule oracle interface."""

from datetime import datetime
from typing import Protocol

from carelog.core.models import ScheduledOccurrence, TaskVersion


class ScheduleOracle(Protocol):
    """Interface for enumerating the occurrences of a task version's schedule."""

    def occurrences(
        self, version: TaskVersion, start: datetime, end: datetime
    ) -> list[ScheduledOccurrence]:
        """Occurrences starting in [start, end), ordered by contiguous index."""
        ...

    def occurrence(self, version: TaskVersion, index: int) -> ScheduledOccurrence | None:
        """The occurrence at `index`. Returns None if the schedule has no such occurrence."""
        ...
