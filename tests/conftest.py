"""Shared fixtures: an in-memory store with daily tasks."""

from datetime import datetime, timedelta, timezone

import pytest

from carelog.adapters import InMemoryStore
from carelog.core.models import Outcome, OutcomeValue, Schedule, TaskVersion
from carelog.events import EventResolver

UTC = timezone.utc


@pytest.fixture
def day0():
    return datetime(2025, 1, 15, tzinfo=UTC)


@pytest.fixture
def week(day0):
    """Start and end of a 7-day range, both inclusive calendar days."""
    return day0, day0 + timedelta(days=6, hours=23, minutes=59)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def resolver(store):
    return EventResolver(store, store.schedules, store)


@pytest.fixture
def add_task(store):
    """Factory adding a daily task, or a new version if the task exists."""

    def _add(
        identifier: str,
        start: datetime,
        end: datetime | None = None,
        targets: tuple[OutcomeValue, ...] = (),
        impacts_adherence: bool = True,
    ) -> TaskVersion:
        current = store.current_version(identifier)
        number = 1 if current is None else int(current.version_id.rsplit("-v", 1)[1]) + 1
        version = TaskVersion(
            identifier=identifier,
            version_id=f"{identifier}-v{number}",
            previous_version_id=current.version_id if current else None,
            impacts_adherence=impacts_adherence,
            schedule=Schedule.daily(start, end, target_values=targets),
        )
        store.add_version(version)
        return version

    return _add


@pytest.fixture
def log(store):
    """Factory storing an outcome for an occurrence."""

    def _log(version: TaskVersion, index: int, *values: OutcomeValue) -> Outcome:
        outcome = Outcome(version.version_id, index, tuple(values) or (OutcomeValue(True),))
        store.add_outcome(outcome)
        return outcome

    return _log
