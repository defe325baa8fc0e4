"""Outcome store interfaces."""

from datetime import datetime
from typing import Protocol

from carelog.core.models import Outcome


class OutcomeStore(Protocol):
    """Interface for reading recorded outcomes."""

    def outcomes(self, version_id: str, start: datetime, end: datetime) -> list[Outcome]:
        """Outcomes of a task version whose occurrence starts in [start, end)."""
        ...


class OutcomeLog(Protocol):
    """Interface for recording outcomes."""

    def add_outcome(self, outcome: Outcome) -> None:
        """Store a new outcome. Fails if the occurrence already has one."""
        ...

    def update_outcome(self, outcome: Outcome) -> None:
        """Replace the stored outcome for the same version and occurrence."""
        ...

    def delete_outcome(self, outcome: Outcome) -> None:
        """Remove the stored outcome for the same version and occurrence."""
        ...
