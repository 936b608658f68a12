from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prospect_fusion.models import FusionResult


class FusionError(Exception):
    """Base class for prospect-fusion errors."""


class InvalidSourcesError(FusionError):
    """The top-level sources payload could not be read as per-channel lists."""


class PersistenceError(FusionError):
    """A sink failed after the run was computed.

    The computed result is kept on the exception so callers can retry or
    persist it elsewhere.
    """

    def __init__(self, message: str, result: "FusionResult") -> None:
        super().__init__(message)
        self.result = result
