"""JSON file-backed store adapter."""

import json
import logging
from pathlib import Path

from carelog.core.models import Outcome, TaskVersion
from carelog.ports import ScheduleOracle

from .memory_store import InMemoryStore

logger = logging.getLogger(__name__)


class JsonFileStore(InMemoryStore):
    """
    In-memory store persisted to a single JSON file.

    Implements VersionStore, OutcomeStore and OutcomeLog protocols. The whole
    file is read on construction and rewritten after every change.
    File layout: {"versions": [...], "outcomes": [...]} with versions listed
    oldest first.
    """

    def __init__(self, path: Path | str, schedules: ScheduleOracle | None = None):
        super().__init__(schedules)
        self.path = Path(path).expanduser()
        self._loading = False
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid store file {self.path}: {e}") from e

        self._loading = True
        try:
            for item in data.get("versions", []):
                self.add_version(TaskVersion.from_dict(item))
            for item in data.get("outcomes", []):
                self.add_outcome(Outcome.from_dict(item))
        finally:
            self._loading = False
        logger.debug(
            f"Loaded {len(self._versions)} versions and {len(self._outcomes)} outcomes from {self.path}"
        )

    def _save(self) -> None:
        if self._loading:
            return
        data = json.dumps(
            {
                "versions": [v.to_dict() for v in self.all_versions()],
                "outcomes": [o.to_dict() for o in self.all_outcomes()],
            },
            indent=2,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Written beside the store, then swapped in whole
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(data)
        tmp.replace(self.path)

    def add_version(self, version: TaskVersion) -> None:
        super().add_version(version)
        self._save()

    def add_outcome(self, outcome: Outcome) -> None:
        super().add_outcome(outcome)
        self._save()

    def update_outcome(self, outcome: Outcome) -> None:
        super().update_outcome(outcome)
        self._save()

    def delete_outcome(self, outcome: Outcome) -> None:
        super().delete_outcome(outcome)
        self._save()
