"""Exceptions raised across plantmerge."""

from __future__ import annotations


class PlantMergeError(Exception):
    """Base class for plantmerge errors."""


class SourceUnavailable(PlantMergeError):
    """A source reader could not produce records.

    Not fatal: the service logs it and continues with the other sources.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source} source unavailable: {reason}")
        self.source = source
        self.reason = reason
