"""carelog CLI - care task events and adherence."""

import json
import logging
import sys
from datetime import date, datetime, time, timedelta

import click

from .adapters import IntervalScheduleOracle, JsonFileStore
from .aggregation import (
    compute_adherence,
    compute_insights,
    count_completed_events,
    count_logged_values,
    total_logged,
)
from .config import Config, load_config
from .core.adherence import calendar_days
from .core.models import Event, OutcomeValue, Schedule, TaskVersion
from .errors import NotFound, StoreError
from .events import EventResolver
from .logbook import log_value, remove_value


def _open_store(config: Config) -> tuple[JsonFileStore, EventResolver]:
    schedules = IntervalScheduleOracle()
    store = JsonFileStore(config.store_path, schedules)
    return store, EventResolver(store, schedules, store)


def _today(config: Config) -> date:
    return datetime.now(config.tz).date()


def _date_range(config: Config, start_date: str | None, days: int | None) -> tuple[datetime, datetime]:
    """Datetimes covering whole calendar days in the configured timezone."""
    first = date.fromisoformat(start_date) if start_date else _today(config)
    last = first + timedelta(days=(days or config.default_days) - 1)
    return (
        datetime.combine(first, time.min, tzinfo=config.tz),
        datetime.combine(last, time.max, tzinfo=config.tz),
    )


def _parse_value(raw: str) -> int | float | str:
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def _parse_target(raw: str) -> OutcomeValue:
    """Parse VALUE or VALUE:UNITS into a target value."""
    value, _, units = raw.partition(":")
    return OutcomeValue(_parse_value(value.strip()), units=units.strip() or None)


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _format_event(event: Event, tz) -> str:
    start = event.occurrence.start.astimezone(tz)
    logged = ", ".join(
        f"{v.value}{' ' + v.units if v.units else ''}" for v in event.logged_values
    ) or "-"
    return f"[{event.occurrence.index:>3}] {start.strftime('%a %b %d %H:%M')}  {event.task.version_id}  {logged}"


range_options = [
    click.option("--start", "start_date", default=None, help="First day (YYYY-MM-DD), defaults to today"),
    click.option("--days", type=int, default=None, help="Number of days, defaults to DEFAULT_DAYS"),
]


def with_range(f):
    for option in reversed(range_options):
        f = option(f)
    return f


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """carelog - care task events and adherence."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command("add-task")
@click.argument("identifier")
@click.option("--title", default="", help="Task title")
@click.option("--start", "start_date", default=None, help="First day (YYYY-MM-DD), defaults to today")
@click.option("--at", "at_time", default="09:00", help="Time of the first occurrence (HH:MM)")
@click.option("--end", "end_date", default=None, help="Day the schedule stops (YYYY-MM-DD, exclusive)")
@click.option(
    "--every",
    "every_hours",
    type=click.FloatRange(min=0, min_open=True),
    default=24.0,
    help="Hours between occurrences",
)
@click.option("--duration", "duration_minutes", type=int, default=60, help="Minutes per occurrence")
@click.option("--target", "targets", multiple=True, help="Expected value, VALUE or VALUE:UNITS")
@click.option("--no-adherence", is_flag=True, help="Exclude the task from adherence")
def add_task(
    identifier: str,
    title: str,
    start_date: str | None,
    at_time: str,
    end_date: str | None,
    every_hours: float,
    duration_minutes: int,
    targets: tuple[str, ...],
    no_adherence: bool,
):
    """Create a task, or a new version of an existing task."""
    config = load_config()
    store, _ = _open_store(config)

    first = date.fromisoformat(start_date) if start_date else _today(config)
    start = datetime.combine(first, time.fromisoformat(at_time), tzinfo=config.tz)
    end = datetime.combine(date.fromisoformat(end_date), time.min, tzinfo=config.tz) if end_date else None

    current = store.current_version(identifier)
    number = 1 if current is None else len([v for v in store.all_versions() if v.identifier == identifier]) + 1
    version = TaskVersion(
        identifier=identifier,
        version_id=f"{identifier}-v{number}",
        previous_version_id=current.version_id if current else None,
        impacts_adherence=not no_adherence,
        title=title or (current.title if current else ""),
        schedule=Schedule(
            start=start,
            end=end,
            interval=timedelta(hours=every_hours),
            duration=timedelta(minutes=duration_minutes),
            target_values=tuple(_parse_target(t) for t in targets),
        ),
    )

    try:
        store.add_version(version)
    except StoreError as e:
        _fail(e)

    click.echo(f"Saved {version.version_id} starting {start.strftime('%a %b %d %H:%M')}")


@main.command()
@click.argument("task")
@with_range
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def events(task: str, start_date: str | None, days: int | None, as_json: bool):
    """List a task's events."""
    config = load_config()
    _, resolver = _open_store(config)
    start, end = _date_range(config, start_date, days)

    try:
        resolved = resolver.resolve_events(task, start, end)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in resolved], indent=2))
        return

    if not resolved:
        click.echo(f"No events for {task}.")
        return

    for event in resolved:
        click.echo(_format_event(event, config.tz))


@main.command()
@click.argument("version_id")
@click.argument("occurrence", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def event(version_id: str, occurrence: int, as_json: bool):
    """Show one occurrence of a task version."""
    config = load_config()
    _, resolver = _open_store(config)

    try:
        resolved = resolver.resolve_event(version_id, occurrence)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(resolved.to_dict(), indent=2))
    else:
        click.echo(_format_event(resolved, config.tz))


@main.command()
@click.option("--task", "tasks", multiple=True, help="Task to include (repeatable), defaults to all")
@with_range
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def adherence(tasks: tuple[str, ...], start_date: str | None, days: int | None, as_json: bool):
    """Show daily adherence."""
    config = load_config()
    _, resolver = _open_store(config)
    start, end = _date_range(config, start_date, days)

    try:
        results = compute_adherence(
            resolver,
            start,
            end,
            list(tasks) or None,
            max_workers=config.max_workers,
            tz=config.tz,
            empty_targets=config.empty_targets,
        )
    except StoreError as e:
        _fail(e)

    dates = calendar_days(start, end, config.tz)
    if as_json:
        click.echo(
            json.dumps(
                [{"date": d.isoformat(), **a.to_dict()} for d, a in zip(dates, results)],
                indent=2,
            )
        )
        return

    for d, a in zip(dates, results):
        click.echo(f"{d.strftime('%a %b %d')}  {a.format()}")


@main.command()
@click.argument("task")
@click.option(
    "--metric",
    type=click.Choice(["count", "total", "completed"]),
    default="count",
    help="count: values logged, total: sum of values, completed: fully complete events",
)
@click.option("--units", default=None, help="Only total values in these units")
@with_range
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def insights(
    task: str,
    metric: str,
    units: str | None,
    start_date: str | None,
    days: int | None,
    as_json: bool,
):
    """Show a daily metric for one task."""
    config = load_config()
    _, resolver = _open_store(config)
    start, end = _date_range(config, start_date, days)

    match metric:
        case "total":
            reducer = total_logged(units)
        case "completed":
            reducer = count_completed_events
        case _:
            reducer = count_logged_values

    try:
        values = compute_insights(resolver, task, start, end, reducer, tz=config.tz)
    except StoreError as e:
        _fail(e)

    dates = calendar_days(start, end, config.tz)
    if as_json:
        click.echo(json.dumps([{"date": d.isoformat(), "value": v} for d, v in zip(dates, values)], indent=2))
        return

    for d, v in zip(dates, values):
        click.echo(f"{d.strftime('%a %b %d')}  {v:g}")


def _target_event(resolver: EventResolver, store: JsonFileStore, task: str, version_id: str | None, occurrence: int) -> Event:
    if version_id is None:
        current = store.current_version(task)
        if current is None:
            raise NotFound(f"No task with identifier: {task}")
        version_id = current.version_id
    return resolver.resolve_event(version_id, occurrence)


@main.command()
@click.argument("task")
@click.argument("value")
@click.option("--occurrence", "-o", type=int, required=True, help="Occurrence index")
@click.option("--version", "version_id", default=None, help="Task version, defaults to the current one")
@click.option("--units", default=None, help="Units of the value")
@click.option("--notes", default=None, help="Free-text notes")
def log(task: str, value: str, occurrence: int, version_id: str | None, units: str | None, notes: str | None):
    """Log a value for an occurrence."""
    config = load_config()
    store, resolver = _open_store(config)

    try:
        target = _target_event(resolver, store, task, version_id, occurrence)
        updated = log_value(
            store,
            target,
            OutcomeValue(_parse_value(value), units=units, source="cli", notes=notes),
        )
    except StoreError as e:
        _fail(e)

    click.echo(f"✓ {len(updated.logged_values)} value(s) logged for occurrence {occurrence}")


@main.command()
@click.argument("task")
@click.argument("position", type=int)
@click.option("--occurrence", "-o", type=int, required=True, help="Occurrence index")
@click.option("--version", "version_id", default=None, help="Task version, defaults to the current one")
def unlog(task: str, position: int, occurrence: int, version_id: str | None):
    """Remove a logged value (POSITION counts from 0, oldest first)."""
    config = load_config()
    store, resolver = _open_store(config)

    try:
        target = _target_event(resolver, store, task, version_id, occurrence)
        updated = remove_value(store, target, position)
    except StoreError as e:
        _fail(e)

    click.echo(f"✓ {len(updated.logged_values)} value(s) left for occurrence {occurrence}")


if __name__ == "__main__":
    main()
