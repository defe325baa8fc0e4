"""Event resolution across a task's version history.

Events are rebuilt on demand by walking a task's versions from newest to
oldest, joining each version's scheduled occurrences with the outcomes logged
against that version.
"""

import logging
from datetime import datetime, timedelta

from .core.models import Event, Outcome, ScheduledOccurrence, TaskVersion
from .errors import FetchFailed, FetchStage, IndexOutOfRange, NotFound
from .ports import OutcomeStore, ScheduleOracle, VersionStore

logger = logging.getLogger(__name__)


def join_events(
    version: TaskVersion,
    occurrences: list[ScheduledOccurrence],
    outcomes: list[Outcome],
) -> list[Event]:
    """
    Pair each occurrence with the outcome logged at its index.

    Occurrences must be ordered with contiguous indices.

    Raises:
        IndexOutOfRange: an outcome's index is not among the occurrences.
    """
    events = [Event(task=version, occurrence=o) for o in occurrences]
    offset = occurrences[0].index if occurrences else 0
    for outcome in outcomes:
        position = outcome.occurrence_index - offset
        if not 0 <= position < len(events):
            raise IndexOutOfRange(
                f"Outcome for occurrence {outcome.occurrence_index} of version "
                f"{version.version_id} is outside the {len(events)} resolved occurrences "
                f"starting at {offset}"
            )
        events[position].outcome = outcome
    return events


class EventResolver:
    """
    Resolves events for tasks from the version, schedule and outcome stores.

    Holds no state of its own beyond the collaborators.
    """

    def __init__(
        self,
        versions: VersionStore,
        schedules: ScheduleOracle,
        outcomes: OutcomeStore,
    ):
        self.versions = versions
        self.schedules = schedules
        self.outcomes = outcomes

    def _current_version(self, identifier: str) -> TaskVersion:
        try:
            version = self.versions.current_version(identifier)
        except Exception as e:
            raise FetchFailed(FetchStage.TASK_LOOKUP, f"task {identifier}: {e}") from e
        if version is None:
            raise NotFound(f"No task with identifier: {identifier}")
        return version

    def _version(self, version_id: str) -> TaskVersion:
        try:
            version = self.versions.version(version_id)
        except Exception as e:
            raise FetchFailed(FetchStage.VERSION_LOOKUP, f"version {version_id}: {e}") from e
        if version is None:
            raise NotFound(f"No task version with id: {version_id}")
        return version

    def _occurrences(
        self, version: TaskVersion, start: datetime, end: datetime
    ) -> list[ScheduledOccurrence]:
        try:
            return self.schedules.occurrences(version, start, end)
        except Exception as e:
            raise FetchFailed(FetchStage.SCHEDULE_LOOKUP, f"version {version.version_id}: {e}") from e

    def _outcomes(self, version_id: str, start: datetime, end: datetime) -> list[Outcome]:
        try:
            return self.outcomes.outcomes(version_id, start, end)
        except Exception as e:
            raise FetchFailed(FetchStage.OUTCOME_LOOKUP, f"version {version_id}: {e}") from e

    def _events_for_version(
        self, version: TaskVersion, start: datetime, end: datetime
    ) -> list[Event]:
        """Events of one version, with the window clipped to the version's schedule."""
        schedule = version.schedule
        start = max(start, schedule.start)
        if schedule.end is not None:
            end = min(end, schedule.end)
        if start >= end:
            return []

        occurrences = self._occurrences(version, start, end)
        outcomes = self._outcomes(version.version_id, start, end)
        logger.debug(
            f"Version {version.version_id}: {len(occurrences)} occurrences, "
            f"{len(outcomes)} outcomes in {start.isoformat()} - {end.isoformat()}"
        )
        return join_events(version, occurrences, outcomes)

    def resolve_events(self, task_identifier: str, start: datetime, end: datetime) -> list[Event]:
        """
        All events of a task in [start, end), oldest first.

        The range may span several versions of the task. Each older version is
        only consulted for the part of the range before its successor started.

        Raises:
            NotFound: the task or one of its versions doesn't exist.
            FetchFailed: a store call failed.
            IndexOutOfRange: a stored outcome doesn't match its version's schedule.
        """
        version = self._current_version(task_identifier)
        window_start, window_end = start, end
        seen: set[str] = set()
        chunks: list[list[Event]] = []

        while True:
            seen.add(version.version_id)
            chunks.append(self._events_for_version(version, window_start, window_end))

            previous_id = version.previous_version_id
            window_end = min(window_end, version.schedule.start)
            if previous_id is None or window_end <= start:
                break
            if previous_id in seen:
                raise FetchFailed(
                    FetchStage.VERSION_LOOKUP,
                    f"version history of {task_identifier} loops back to {previous_id}",
                )
            version = self._version(previous_id)
            window_start = max(start, version.schedule.start)

        logger.debug(f"Resolved {task_identifier} across {len(chunks)} version(s)")
        return [event for chunk in reversed(chunks) for event in chunk]

    def resolve_event(self, version_id: str, occurrence_index: int) -> Event:
        """
        The event for one occurrence of a specific task version.

        Raises:
            NotFound: the version or the occurrence doesn't exist.
            FetchFailed: a store call failed.
        """
        version = self._version(version_id)
        try:
            occurrence = self.schedules.occurrence(version, occurrence_index)
        except Exception as e:
            raise FetchFailed(FetchStage.SCHEDULE_LOOKUP, f"version {version_id}: {e}") from e
        if occurrence is None:
            raise NotFound(f"Invalid occurrence {occurrence_index} for task version {version_id}")

        # Pad the window so the occurrence's own start is inside it
        early = occurrence.start - timedelta(seconds=1)
        late = occurrence.end + timedelta(seconds=1)
        outcomes = self._outcomes(version_id, early, late)
        outcome = next((o for o in outcomes if o.occurrence_index == occurrence_index), None)
        return Event(task=version, occurrence=occurrence, outcome=outcome)

    def fetch_outcome(self, version_id: str, occurrence_index: int) -> Outcome:
        """
        The outcome logged for one occurrence of a task version.

        Raises:
            NotFound: nothing has been logged for the occurrence.
        """
        event = self.resolve_event(version_id, occurrence_index)
        if event.outcome is None:
            raise NotFound(f"No outcome for occurrence {occurrence_index} of version {version_id}")
        return event.outcome
