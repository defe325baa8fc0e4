"""Functional core - pure business logic with no I/O."""

from .models import Event, Outcome, OutcomeValue, Schedule, ScheduledOccurrence, TaskVersion
from .completion import completion, expects_values
from .adherence import (
    Adherence,
    AdherenceKind,
    EmptyTargetPolicy,
    average_completion,
    calendar_days,
    days_between,
    group_by_day,
    local_date,
)

__all__ = [
    # Models
    "Event",
    "Outcome",
    "OutcomeValue",
    "Schedule",
    "ScheduledOccurrence",
    "TaskVersion",
    # Completion
    "completion",
    "expects_values",
    # Adherence
    "Adherence",
    "AdherenceKind",
    "EmptyTargetPolicy",
    "average_completion",
    "calendar_days",
    "days_between",
    "group_by_day",
    "local_date",
]
