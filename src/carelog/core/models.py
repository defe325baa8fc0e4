"""Pure care-task domain models - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class OutcomeValue:
    """A single value, either expected by a schedule or logged by a user."""

    value: str | int | float
    units: str | None = None
    source: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    notes: str | None = None

    @property
    def numeric(self) -> float:
        """Numeric value; strings count as 0."""
        if isinstance(self.value, bool) or isinstance(self.value, str):
            return 0.0
        return float(self.value)

    def to_dict(self) -> dict:
        data = {"value": self.value, "created_at": _format_timestamp(self.created_at)}
        if self.units is not None:
            data["units"] = self.units
        if self.source is not None:
            data["source"] = self.source
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OutcomeValue":
        return cls(
            value=data["value"],
            units=data.get("units"),
            source=data.get("source"),
            created_at=_parse_timestamp(data.get("created_at")) or datetime.now(timezone.utc),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class Schedule:
    """
    When a task version occurs.

    Occurrences start at `start` and repeat every `interval`, each lasting
    `duration`, until `end` (exclusive) if there is one.
    """

    start: datetime
    end: datetime | None = None
    interval: timedelta = timedelta(days=1)
    duration: timedelta = timedelta(hours=1)
    target_values: tuple[OutcomeValue, ...] = ()

    @classmethod
    def daily(
        cls,
        start: datetime,
        end: datetime | None = None,
        duration: timedelta = timedelta(hours=1),
        target_values: tuple[OutcomeValue, ...] = (),
    ) -> "Schedule":
        return cls(
            start=start,
            end=end,
            interval=timedelta(days=1),
            duration=duration,
            target_values=tuple(target_values),
        )

    def to_dict(self) -> dict:
        return {
            "start": _format_timestamp(self.start),
            "end": _format_timestamp(self.end),
            "interval_seconds": self.interval.total_seconds(),
            "duration_seconds": self.duration.total_seconds(),
            "target_values": [v.to_dict() for v in self.target_values],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Schedule":
        return cls(
            start=datetime.fromisoformat(data["start"]),
            end=_parse_timestamp(data.get("end")),
            interval=timedelta(seconds=data.get("interval_seconds", 86400)),
            duration=timedelta(seconds=data.get("duration_seconds", 3600)),
            target_values=tuple(OutcomeValue.from_dict(v) for v in data.get("target_values", [])),
        )


@dataclass(frozen=True)
class TaskVersion:
    """One immutable revision of a task."""

    identifier: str
    version_id: str
    schedule: Schedule
    previous_version_id: str | None = None
    impacts_adherence: bool = True
    title: str = ""

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "version_id": self.version_id,
            "previous_version_id": self.previous_version_id,
            "impacts_adherence": self.impacts_adherence,
            "title": self.title,
            "schedule": self.schedule.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskVersion":
        return cls(
            identifier=data["identifier"],
            version_id=data["version_id"],
            schedule=Schedule.from_dict(data["schedule"]),
            previous_version_id=data.get("previous_version_id"),
            impacts_adherence=data.get("impacts_adherence", True),
            title=data.get("title", ""),
        )


@dataclass(frozen=True)
class ScheduledOccurrence:
    """One scheduled instance of a task version, spanning [start, end)."""

    index: int
    start: datetime
    end: datetime
    target_values: tuple[OutcomeValue, ...] = ()

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "start": _format_timestamp(self.start),
            "end": _format_timestamp(self.end),
            "target_values": [v.to_dict() for v in self.target_values],
        }


@dataclass(frozen=True)
class Outcome:
    """Values logged against one occurrence of one task version."""

    task_version_id: str
    occurrence_index: int
    values: tuple[OutcomeValue, ...] = ()

    def with_value(self, value: OutcomeValue) -> "Outcome":
        """Copy of this outcome with `value` appended."""
        return replace(self, values=self.values + (value,))

    def without_value(self, value: OutcomeValue) -> "Outcome":
        """Copy of this outcome with the first occurrence of `value` removed."""
        values = list(self.values)
        values.remove(value)
        return replace(self, values=tuple(values))

    def values_by_creation(self) -> list[OutcomeValue]:
        """Values sorted oldest first."""
        return sorted(self.values, key=lambda v: v.created_at)

    def to_dict(self) -> dict:
        return {
            "task_version_id": self.task_version_id,
            "occurrence_index": self.occurrence_index,
            "values": [v.to_dict() for v in self.values],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Outcome":
        return cls(
            task_version_id=data["task_version_id"],
            occurrence_index=data["occurrence_index"],
            values=tuple(OutcomeValue.from_dict(v) for v in data.get("values", [])),
        )


@dataclass
class Event:
    """An occurrence joined with the outcome logged for it, if any."""

    task: TaskVersion
    occurrence: ScheduledOccurrence
    outcome: Outcome | None = None

    @property
    def logged_values(self) -> tuple[OutcomeValue, ...]:
        return self.outcome.values if self.outcome else ()

    def to_dict(self) -> dict:
        return {
            "task": self.task.identifier,
            "version_id": self.task.version_id,
            "occurrence": self.occurrence.to_dict(),
            "outcome": self.outcome.to_dict() if self.outcome else None,
        }
