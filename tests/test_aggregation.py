"""Tests for adherence and insight aggregation."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest.mock import patch

import pytest

from carelog.aggregation import (
    compute_adherence,
    compute_insights,
    count_completed_events,
    count_logged_values,
    total_logged,
)
from carelog.core.adherence import Adherence, AdherenceKind, EmptyTargetPolicy
from carelog.core.models import OutcomeValue
from carelog.errors import FetchFailed, FetchStage, NotFound

PILL = OutcomeValue(True)


def mg(amount):
    return OutcomeValue(amount, units="mg")


class TestComputeAdherenceNoTasks:
    def test_empty_store(self, resolver, week):
        result = compute_adherence(resolver, *week)
        assert result == [Adherence.no_tasks()] * 7

    def test_no_adherence_tasks_skips_event_resolution(self, resolver, store, add_task, day0, week):
        add_task("journal", day0, impacts_adherence=False)
        with (
            patch.object(resolver, "resolve_events") as resolve,
            patch.object(store, "outcomes") as outcomes,
        ):
            result = compute_adherence(resolver, *week)

        assert result == [Adherence.no_tasks()] * 7
        resolve.assert_not_called()
        outcomes.assert_not_called()

    def test_named_task_without_adherence(self, resolver, add_task, day0, week):
        add_task("journal", day0, impacts_adherence=False)
        add_task("meds", day0, targets=(PILL,))
        result = compute_adherence(resolver, *week, task_identifiers=["journal"])
        assert all(a.kind == AdherenceKind.NO_TASKS for a in result)


class TestComputeAdherence:
    def test_daily_progress(self, resolver, add_task, log, day0, week):
        meds = add_task("meds", day0 + timedelta(hours=9), targets=(PILL,))
        log(meds, 0)
        log(meds, 2)
        result = compute_adherence(resolver, *week)

        assert [a.value for a in result] == [1.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0]
        assert all(a.kind == AdherenceKind.PROGRESS for a in result)

    def test_days_without_occurrences_have_no_events(self, resolver, add_task, day0, week):
        add_task("meds", day0 + timedelta(days=3, hours=9), targets=(PILL,))
        result = compute_adherence(resolver, *week)

        assert result[:3] == [Adherence.no_events()] * 3
        assert result[3:] == [Adherence.progress(0.0)] * 4

    def test_newest_version_after_range_end(self, resolver, add_task, day0, week):
        add_task("meds", day0 - timedelta(days=10) + timedelta(hours=9), targets=(PILL,))
        add_task("meds", day0 + timedelta(days=10, hours=9), targets=(PILL,))
        assert compute_adherence(resolver, *week) == [Adherence.progress(0.0)] * 7

    def test_averages_across_tasks(self, resolver, add_task, log, day0, week):
        meds = add_task("meds", day0 + timedelta(hours=9), targets=(mg(10),))
        add_task("walk", day0 + timedelta(hours=18), targets=(PILL,))
        log(meds, 0, mg(5))
        result = compute_adherence(resolver, *week)

        # (0.5 + 0.0) / 2 on day 0
        assert result[0] == Adherence.progress(0.25)
        assert result[1] == Adherence.progress(0.0)

    def test_only_named_tasks(self, resolver, add_task, log, day0, week):
        meds = add_task("meds", day0 + timedelta(hours=9), targets=(PILL,))
        add_task("walk", day0 + timedelta(hours=18), targets=(PILL,))
        log(meds, 0)
        result = compute_adherence(resolver, *week, task_identifiers=["meds"])
        assert result[0] == Adherence.progress(1.0)

    def test_spans_task_versions(self, resolver, add_task, log, day0, week):
        v1 = add_task("meds", day0 + timedelta(hours=9), targets=(PILL,))
        log(v1, 0)
        v2 = add_task("meds", day0 + timedelta(days=1, hours=20), targets=(PILL, PILL))
        log(v2, 0, PILL)
        result = compute_adherence(resolver, *week)

        assert result[0] == Adherence.progress(1.0)
        # v1 at 09:00 (missed) and v2 at 20:00 (half done)
        assert result[1] == Adherence.progress(0.25)

    def test_unknown_named_task(self, resolver, add_task, day0, week):
        add_task("meds", day0, targets=(PILL,))
        with pytest.raises(NotFound):
            compute_adherence(resolver, *week, task_identifiers=["meds", "ghost"])

    def test_task_lookup_failure_is_wrapped(self, resolver, store, week):
        with patch.object(store, "current_versions", side_effect=OSError("disk")):
            with pytest.raises(FetchFailed) as exc_info:
                compute_adherence(resolver, *week)
        assert exc_info.value.stage == FetchStage.TASK_LOOKUP

    def test_empty_target_policy(self, resolver, add_task, day0, week):
        add_task("stretch", day0 + timedelta(hours=8))
        add_task("meds", day0 + timedelta(hours=9), targets=(PILL,))

        complete = compute_adherence(resolver, *week)
        excluded = compute_adherence(resolver, *week, empty_targets=EmptyTargetPolicy.EXCLUDE)

        assert complete[0] == Adherence.progress(0.5)
        assert excluded[0] == Adherence.progress(0.0)

    def test_uses_supplied_executor(self, resolver, add_task, log, day0, week):
        meds = add_task("meds", day0 + timedelta(hours=9), targets=(PILL,))
        log(meds, 0)
        with ThreadPoolExecutor(max_workers=2) as executor:
            with patch.object(executor, "submit", wraps=executor.submit) as submit:
                result = compute_adherence(resolver, *week, executor=executor)
            assert submit.call_count == 1
            # Still usable: the caller owns the executor
            assert executor.submit(lambda: 42).result() == 42
        assert result[0] == Adherence.progress(1.0)


class TestComputeAdherenceFailures:
    def test_one_failure_fails_everything(self, resolver, add_task, day0, week):
        for name in ("a", "b", "c"):
            add_task(name, day0, targets=(PILL,))
        real = resolver.resolve_events
        calls = []

        def flaky(identifier, start, end):
            calls.append(identifier)
            if identifier == "b":
                raise NotFound("b vanished")
            return real(identifier, start, end)

        with patch.object(resolver, "resolve_events", side_effect=flaky):
            with pytest.raises(FetchFailed) as exc_info:
                compute_adherence(resolver, *week)

        assert exc_info.value.stage == FetchStage.EVENT_LOOKUP
        assert isinstance(exc_info.value.__cause__, NotFound)
        # Every branch still ran to completion
        assert sorted(calls) == ["a", "b", "c"]

    def test_first_failure_in_task_order_wins(self, resolver, add_task, day0, week):
        for name in ("a", "b", "c"):
            add_task(name, day0, targets=(PILL,))

        def failing(identifier, start, end):
            raise RuntimeError(f"{identifier} failed")

        with patch.object(resolver, "resolve_events", side_effect=failing):
            with pytest.raises(FetchFailed) as exc_info:
                compute_adherence(resolver, *week)

        assert str(exc_info.value.__cause__) == "a failed"


class TestComputeInsights:
    def test_custom_reducer(self, resolver, add_task, day0, week):
        add_task("walk", day0 + timedelta(hours=9))
        add_task("walk", day0 + timedelta(days=3, hours=18))
        values = compute_insights(resolver, "walk", *week, lambda events: len(events))
        # Day 3 has the old 09:00 and the new 18:00 occurrence
        assert values == [1, 1, 1, 2, 1, 1, 1]

    def test_count_logged_values(self, resolver, add_task, log, day0, week):
        walk = add_task("walk", day0 + timedelta(hours=9))
        log(walk, 1, PILL, PILL, PILL)
        values = compute_insights(resolver, "walk", *week, count_logged_values)
        assert values == [0.0, 3.0, 0.0, 0.0, 0.0, 0.0, 0.0]

    def test_total_logged_by_units(self, resolver, add_task, log, day0, week):
        meds = add_task("meds", day0 + timedelta(hours=9), targets=(mg(10),))
        log(meds, 0, mg(5), mg(2.5), OutcomeValue(1, units="tablet"))
        values = compute_insights(resolver, "meds", *week, total_logged("mg"))
        assert values[0] == 7.5
        assert values[1] == 0.0

    def test_count_completed_events(self, resolver, add_task, log, day0, week):
        meds = add_task("meds", day0 + timedelta(hours=9), targets=(mg(10),))
        log(meds, 0, mg(10))
        log(meds, 1, mg(5))
        values = compute_insights(resolver, "meds", *week, count_completed_events)
        assert values[:3] == [1.0, 0.0, 0.0]

    def test_no_events_gives_reducer_empty_days(self, resolver, add_task, day0, week):
        add_task("walk", day0 + timedelta(days=30))
        values = compute_insights(resolver, "walk", *week, lambda events: len(events))
        assert values == [0] * 7

    def test_missing_task(self, resolver, week):
        with pytest.raises(NotFound):
            compute_insights(resolver, "ghost", *week, count_logged_values)
