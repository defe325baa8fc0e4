"""Pure completion logic - no I/O dependencies."""

from collections import defaultdict

from .models import Event, OutcomeValue


def _tally(values: tuple[OutcomeValue, ...]) -> tuple[int, dict[str, float]]:
    """Split values into a unit-less count and per-unit numeric totals."""
    count = 0
    totals: dict[str, float] = defaultdict(float)
    for v in values:
        if v.units is None:
            count += 1
        else:
            totals[v.units] += v.numeric
    return count, dict(totals)


def expects_values(event: Event) -> bool:
    """True if the event's occurrence has any target values."""
    return bool(event.occurrence.target_values)


def completion(event: Event) -> float:
    """
    Fraction of the event's target values satisfied by its logged values.

    Each unit-less target counts as one required item; each distinct unit is
    one more item, satisfied in proportion to the logged total for that unit
    (capped at 1). An event that expects nothing counts as complete.

    Pure function - no I/O.
    """
    required_count, required_totals = _tally(event.occurrence.target_values)
    denominator = required_count + len(required_totals)
    if denominator == 0:
        return 1.0

    logged_count, logged_totals = _tally(event.logged_values)

    numerator = float(min(logged_count, required_count))
    for units, required in required_totals.items():
        if required <= 0:
            numerator += 1.0
            continue
        numerator += max(0.0, min(1.0, logged_totals.get(units, 0.0) / required))

    return numerator / denominator
