"""Exceptions raised by the feed engine."""

from __future__ import annotations

from typing import Any, Optional


class FeedEngineError(Exception):
    """Base class for every error the engine raises on purpose."""


class InvalidInputError(FeedEngineError, ValueError):
    """A posting or profile record failed validation.

    `record_id` names the offending record when the record carries an id, so the
    caller can drop or repair it upstream.
    """

    def __init__(self, message: str, record_id: Optional[Any] = None) -> None:
        self.record_id = record_id
        if record_id is not None:
            message = f"{message} (record {record_id!r})"
        super().__init__(message)


class StoreError(FeedEngineError):
    """The backing data store could not be read."""
