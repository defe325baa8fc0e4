"""Pure adherence domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum

from .completion import completion, expects_values
from .models import Event


class AdherenceKind(Enum):
    """What a day's adherence value means."""

    NO_TASKS = "no_tasks"  # No adherence-impacting task existed
    NO_EVENTS = "no_events"  # Tasks existed but nothing was scheduled
    PROGRESS = "progress"  # Fraction of scheduled work completed


class EmptyTargetPolicy(Enum):
    """How events that expect no outcome values count towards adherence."""

    COMPLETE = "complete"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class Adherence:
    """Completion summary for one calendar day."""

    kind: AdherenceKind
    value: float | None = None

    @classmethod
    def no_tasks(cls) -> "Adherence":
        return cls(AdherenceKind.NO_TASKS)

    @classmethod
    def no_events(cls) -> "Adherence":
        return cls(AdherenceKind.NO_EVENTS)

    @classmethod
    def progress(cls, fraction: float) -> "Adherence":
        if not 0.0 <= fraction <= 1.0:
            raise ValueError(f"Adherence must be between 0 and 1, got {fraction}")
        return cls(AdherenceKind.PROGRESS, fraction)

    def format(self) -> str:
        """Human-readable form for display."""
        if self.kind == AdherenceKind.PROGRESS:
            return f"{self.value:.0%}"
        if self.kind == AdherenceKind.NO_EVENTS:
            return "no events"
        return "no tasks"

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "value": self.value}


def local_date(dt: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar date of `dt` in `tz`. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz).date()


def days_between(start: datetime, end: datetime, tz: tzinfo = timezone.utc) -> int:
    """Number of calendar-day boundaries crossed going from start to end."""
    return (local_date(end, tz) - local_date(start, tz)).days


def calendar_days(start: datetime, end: datetime, tz: tzinfo = timezone.utc) -> list[date]:
    """Every calendar date from start to end, both inclusive."""
    first = local_date(start, tz)
    return [first + timedelta(days=i) for i in range(days_between(start, end, tz) + 1)]


def group_by_day(
    events: list[Event],
    start: datetime,
    end: datetime,
    tz: tzinfo = timezone.utc,
) -> list[list[Event]]:
    """
    Bucket events by the calendar day their occurrence starts on.

    Bucket i holds the events starting on day start + i, for every day from
    start to end inclusive. Input order is preserved within a bucket.

    Pure function - no I/O.

    Raises:
        IndexError: an event starts outside the range.
    """
    first = local_date(start, tz)
    days: list[list[Event]] = [[] for _ in range(days_between(start, end, tz) + 1)]
    for event in events:
        index = (local_date(event.occurrence.start, tz) - first).days
        if not 0 <= index < len(days):
            raise IndexError(
                f"Event at {event.occurrence.start.isoformat()} is outside "
                f"{start.isoformat()} - {end.isoformat()}"
            )
        days[index].append(event)
    return days


def average_completion(
    events: list[Event],
    empty_targets: EmptyTargetPolicy = EmptyTargetPolicy.COMPLETE,
) -> Adherence:
    """
    Unweighted mean completion of a day's events.

    Pure function - no I/O.
    """
    if empty_targets == EmptyTargetPolicy.EXCLUDE:
        events = [e for e in events if expects_values(e)]
    if not events:
        return Adherence.no_events()
    fractions = [completion(e) for e in events]
    return Adherence.progress(min(1.0, sum(fractions) / len(fractions)))
