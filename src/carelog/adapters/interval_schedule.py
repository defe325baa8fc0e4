"""Fixed-interval schedule adapter."""

from datetime import datetime

from carelog.core.models import ScheduledOccurrence, TaskVersion


class IntervalScheduleOracle:
    """
    Enumerates occurrences every `schedule.interval` from `schedule.start`.

    Implements ScheduleOracle protocol. Occurrence k starts at
    start + k * interval; every occurrence carries the schedule's target values.
    """

    def _make(self, version: TaskVersion, index: int) -> ScheduledOccurrence:
        schedule = version.schedule
        start = schedule.start + index * schedule.interval
        return ScheduledOccurrence(
            index=index,
            start=start,
            end=start + schedule.duration,
            target_values=schedule.target_values,
        )

    def _in_schedule(self, version: TaskVersion, start: datetime) -> bool:
        end = version.schedule.end
        return end is None or start < end

    def occurrences(
        self, version: TaskVersion, start: datetime, end: datetime
    ) -> list[ScheduledOccurrence]:
        """Occurrences starting in [start, end), ordered by index."""
        schedule = version.schedule
        if schedule.interval.total_seconds() <= 0:
            raise ValueError(f"Schedule interval must be positive for version {version.version_id}")

        # First index whose start is at or after `start` (ceiling division)
        index = max(0, -((schedule.start - start) // schedule.interval))
        occurrences = []
        while True:
            occurrence = self._make(version, index)
            if occurrence.start >= end or not self._in_schedule(version, occurrence.start):
                break
            occurrences.append(occurrence)
            index += 1
        return occurrences

    def occurrence(self, version: TaskVersion, index: int) -> ScheduledOccurrence | None:
        """The occurrence at `index`, or None if the schedule ends before it."""
        if index < 0:
            return None
        occurrence = self._make(version, index)
        if not self._in_schedule(version, occurrence.start):
            return None
        return occurrence
