"""Recording and removing outcome values for an event."""

import logging
from dataclasses import replace

from .core.models import Event, Outcome, OutcomeValue
from .errors import IndexOutOfRange
from .ports import OutcomeLog

logger = logging.getLogger(__name__)


def log_value(log: OutcomeLog, event: Event, value: OutcomeValue) -> Event:
    """
    Log a value against an event.

    Appends to the event's outcome if it has one, otherwise creates a new
    outcome for the event's occurrence. Returns the updated event.
    """
    if event.outcome is not None:
        outcome = event.outcome.with_value(value)
        log.update_outcome(outcome)
    else:
        outcome = Outcome(
            task_version_id=event.task.version_id,
            occurrence_index=event.occurrence.index,
            values=(value,),
        )
        log.add_outcome(outcome)

    logger.info(
        f"Logged {value.value!r} for {event.task.identifier} occurrence {event.occurrence.index}"
    )
    return replace(event, outcome=outcome)


def remove_value(log: OutcomeLog, event: Event, position: int) -> Event:
    """
    Remove the value at `position`, counting values oldest first.

    The outcome is deleted once its last value is removed. Returns the
    updated event.

    Raises:
        IndexOutOfRange: the event has no value at `position`.
    """
    values = event.outcome.values_by_creation() if event.outcome else []
    if not 0 <= position < len(values):
        raise IndexOutOfRange(
            f"No value at position {position} for {event.task.identifier} "
            f"occurrence {event.occurrence.index} ({len(values)} logged)"
        )

    outcome = event.outcome.without_value(values[position])
    if outcome.values:
        log.update_outcome(outcome)
        updated: Outcome | None = outcome
    else:
        log.delete_outcome(outcome)
        updated = None

    logger.info(
        f"Removed value {position} for {event.task.identifier} occurrence {event.occurrence.index}"
    )
    return replace(event, outcome=updated)
