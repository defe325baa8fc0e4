"""Task version store interface."""

from typing import Protocol

from carelog.core.models import TaskVersion


class VersionStore(Protocol):
    """Interface for looking up task versions from any backend."""

    def current_version(self, identifier: str) -> TaskVersion | None:
        """Newest version of a task. Returns None if the task doesn't exist."""
        ...

    def version(self, version_id: str) -> TaskVersion | None:
        """A specific version by id. Returns None if not found."""
        ...

    def current_versions(self, identifiers: list[str] | None = None) -> list[TaskVersion]:
        """
        Newest version of every task, or of the named tasks only.

        Raises NotFound if a named task doesn't exist.
        """
        ...
