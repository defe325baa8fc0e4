"""Per-day aggregation of events into adherence and insight values."""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone, tzinfo
from typing import Callable

from .core.adherence import (
    Adherence,
    EmptyTargetPolicy,
    average_completion,
    calendar_days,
    group_by_day,
)
from .core.completion import completion
from .core.models import Event, TaskVersion
from .errors import FetchFailed, FetchStage, StoreError
from .events import EventResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

DailyReducer = Callable[[list[Event]], float]


def _candidate_tasks(resolver: EventResolver, task_identifiers: list[str] | None) -> list[TaskVersion]:
    try:
        return resolver.versions.current_versions(task_identifiers)
    except StoreError:
        raise
    except Exception as e:
        raise FetchFailed(FetchStage.TASK_LOOKUP, str(e)) from e


def _resolve_all(
    resolver: EventResolver,
    identifiers: list[str],
    start: datetime,
    end: datetime,
    executor: Executor,
) -> list[Event]:
    """Resolve every task concurrently and wait for all before checking errors."""
    futures: list[Future] = [
        executor.submit(resolver.resolve_events, identifier, start, end)
        for identifier in identifiers
    ]
    wait(futures)

    for identifier, future in zip(identifiers, futures):
        error = future.exception()
        if error is not None:
            logger.warning(f"Event resolution failed for {identifier}: {error}")
            raise FetchFailed(
                FetchStage.EVENT_LOOKUP,
                f"could not compute adherence, task {identifier}: {error}",
            ) from error

    return [event for future in futures for event in future.result()]


def compute_adherence(
    resolver: EventResolver,
    start: datetime,
    end: datetime,
    task_identifiers: list[str] | None = None,
    *,
    executor: Executor | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    tz: tzinfo = timezone.utc,
    empty_targets: EmptyTargetPolicy = EmptyTargetPolicy.COMPLETE,
) -> list[Adherence]:
    """
    Daily adherence across adherence-impacting tasks, one entry per calendar day.

    Args:
        resolver: Event resolver wired to the stores
        start: Start of the range
        end: End of the range (its calendar day is included)
        task_identifiers: Tasks to include, or None for all tasks
        executor: Where to run per-task resolution. A thread pool of
            `max_workers` is created for the call if omitted.
        tz: Timezone whose calendar days bucket the events
        empty_targets: How events expecting no values count

    Returns:
        Adherence for each day from start to end

    Raises:
        NotFound: a named task doesn't exist.
        FetchFailed: a task lookup or any task's event resolution failed.
    """
    tasks = [t for t in _candidate_tasks(resolver, task_identifiers) if t.impacts_adherence]
    if not tasks:
        logger.debug("No adherence-impacting tasks, skipping event resolution")
        return [Adherence.no_tasks() for _ in calendar_days(start, end, tz)]

    identifiers = [t.identifier for t in tasks]
    logger.debug(f"Resolving events for {len(identifiers)} task(s)")

    if executor is not None:
        events = _resolve_all(resolver, identifiers, start, end, executor)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            events = _resolve_all(resolver, identifiers, start, end, pool)

    return [average_completion(day, empty_targets) for day in group_by_day(events, start, end, tz)]


def compute_insights(
    resolver: EventResolver,
    task_identifier: str,
    start: datetime,
    end: datetime,
    reducer: DailyReducer,
    *,
    tz: tzinfo = timezone.utc,
) -> list[float]:
    """
    Apply `reducer` to each day's events of one task.

    Returns one value per calendar day from start to end. Store errors
    propagate as raised by the resolver.
    """
    events = resolver.resolve_events(task_identifier, start, end)
    return [reducer(day) for day in group_by_day(events, start, end, tz)]


# ============== Stock Reducers ==============


def count_logged_values(events: list[Event]) -> float:
    """Number of values logged across the day's events."""
    return float(sum(len(e.logged_values) for e in events))


def total_logged(units: str | None = None) -> DailyReducer:
    """Reducer summing logged numeric values, optionally only those in `units`."""

    def reduce(events: list[Event]) -> float:
        return float(sum(
            v.numeric
            for e in events
            for v in e.logged_values
            if units is None or v.units == units
        ))

    return reduce


def count_completed_events(events: list[Event]) -> float:
    """Number of the day's events that are fully complete."""
    return float(sum(1 for e in events if e.outcome is not None and completion(e) >= 1.0))
