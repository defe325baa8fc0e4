"""carelog - event resolution and adherence for care tasks."""

__version__ = "0.1.0"
