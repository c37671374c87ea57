"""Error taxonomy for the rationale pipeline.

Each request fails independently; none of these are fatal to the process.
"""

from __future__ import annotations

from typing import Any


class RationaleError(Exception):
    """Base class for pipeline errors."""


class ValidationError(RationaleError):
    """The request payload did not match the expected shape.

    ``details`` lists every offending field as ``{"field", "message"}``.
    """

    def __init__(self, details: list[dict[str, Any]]):
        self.details = details
        fields = ", ".join(str(item.get("field", "")) for item in details)
        super().__init__(f"Invalid inputs: {fields}")


class GenerationError(RationaleError):
    """The text-generation provider failed or returned unusable content."""


class PersistenceError(RationaleError):
    """Writing to or reading from the audit store failed."""
