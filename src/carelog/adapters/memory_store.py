"""In-memory task version and outcome store."""

from datetime import datetime

from carelog.core.models import Outcome, TaskVersion
from carelog.errors import NotFound, StoreError
from carelog.ports import ScheduleOracle

from .interval_schedule import IntervalScheduleOracle


class InMemoryStore:
    """
    In-memory store for task versions and outcomes.

    Implements VersionStore, OutcomeStore and OutcomeLog protocols. Outcomes are
    matched to dates through the schedule oracle, so an outcome falls in a range
    when the occurrence it answers starts in that range.
    """

    def __init__(self, schedules: ScheduleOracle | None = None):
        self.schedules = schedules or IntervalScheduleOracle()
        self._versions: dict[str, TaskVersion] = {}
        self._current: dict[str, str] = {}
        self._outcomes: dict[tuple[str, int], Outcome] = {}

    # ============== Versions ==============

    def add_version(self, version: TaskVersion) -> None:
        """Store a version and make it the task's current one."""
        if version.version_id in self._versions:
            raise StoreError(f"Version {version.version_id} already exists")
        previous = version.previous_version_id
        if previous is not None:
            if previous not in self._versions:
                raise NotFound(f"No task version with id: {previous}")
            if self._current.get(version.identifier) != previous:
                raise StoreError(
                    f"Version {version.version_id} must follow the current version of {version.identifier}"
                )
        elif version.identifier in self._current:
            raise StoreError(f"Task {version.identifier} already exists")
        self._versions[version.version_id] = version
        self._current[version.identifier] = version.version_id

    def current_version(self, identifier: str) -> TaskVersion | None:
        version_id = self._current.get(identifier)
        return self._versions[version_id] if version_id else None

    def version(self, version_id: str) -> TaskVersion | None:
        return self._versions.get(version_id)

    def current_versions(self, identifiers: list[str] | None = None) -> list[TaskVersion]:
        if identifiers is None:
            identifiers = sorted(self._current)
        versions = []
        for identifier in identifiers:
            version = self.current_version(identifier)
            if version is None:
                raise NotFound(f"No task with identifier: {identifier}")
            versions.append(version)
        return versions

    def all_versions(self) -> list[TaskVersion]:
        return list(self._versions.values())

    # ============== Outcomes ==============

    def outcomes(self, version_id: str, start: datetime, end: datetime) -> list[Outcome]:
        version = self.version(version_id)
        if version is None:
            return []
        matched = []
        for (outcome_version_id, index), outcome in self._outcomes.items():
            if outcome_version_id != version_id:
                continue
            occurrence = self.schedules.occurrence(version, index)
            if occurrence is not None and start <= occurrence.start < end:
                matched.append(outcome)
        return sorted(matched, key=lambda o: o.occurrence_index)

    def all_outcomes(self) -> list[Outcome]:
        return list(self._outcomes.values())

    def add_outcome(self, outcome: Outcome) -> None:
        key = (outcome.task_version_id, outcome.occurrence_index)
        if outcome.task_version_id not in self._versions:
            raise NotFound(f"No task version with id: {outcome.task_version_id}")
        if key in self._outcomes:
            raise StoreError(
                f"Occurrence {outcome.occurrence_index} of version {outcome.task_version_id} "
                "already has an outcome"
            )
        self._outcomes[key] = outcome

    def update_outcome(self, outcome: Outcome) -> None:
        key = (outcome.task_version_id, outcome.occurrence_index)
        if key not in self._outcomes:
            raise NotFound(
                f"No outcome for occurrence {outcome.occurrence_index} of version {outcome.task_version_id}"
            )
        self._outcomes[key] = outcome

    def delete_outcome(self, outcome: Outcome) -> None:
        key = (outcome.task_version_id, outcome.occurrence_index)
        if self._outcomes.pop(key, None) is None:
            raise NotFound(
                f"No outcome for occurrence {outcome.occurrence_index} of version {outcome.task_version_id}"
            )
