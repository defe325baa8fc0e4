"""Errors raised by the event and adherence engine."""

from enum import Enum


class FetchStage(Enum):
    """Which collaborator call failed."""

    TASK_LOOKUP = "task lookup"
    VERSION_LOOKUP = "version lookup"
    OUTCOME_LOOKUP = "outcome lookup"
    SCHEDULE_LOOKUP = "schedule lookup"
    EVENT_LOOKUP = "event lookup"


class StoreError(Exception):
    """Base class for all carelog store errors."""

    pass


class NotFound(StoreError):
    """Raised when a task, version, occurrence or outcome does not exist."""

    pass


class FetchFailed(StoreError):
    """Raised when a collaborator call fails. The original error is chained."""

    def __init__(self, stage: FetchStage, reason: str):
        super().__init__(f"{stage.value} failed: {reason}")
        self.stage = stage
        self.reason = reason


class IndexOutOfRange(StoreError):
    """Raised when an outcome references an occurrence outside the resolved window."""

    pass
