"""Adapters - I/O implementations of ports."""

from .interval_schedule import IntervalScheduleOracle
from .memory_store import InMemoryStore
from .json_store import JsonFileStore

__all__ = [
    "IntervalScheduleOracle",
    "InMemoryStore",
    "JsonFileStore",
]
