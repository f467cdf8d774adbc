"""Exceptions raised by the event handler. Every one of them is fatal."""

from __future__ import annotations

from typing import Optional


class StatusHookError(Exception):
    """Base class for all handler errors."""


class ConfigurationError(StatusHookError):
    """A required connection setting is missing or invalid."""


class ArgumentError(StatusHookError):
    """A required command line argument is missing or invalid."""


class TransportError(StatusHookError):
    """The API call failed or its response could not be decoded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(StatusHookError):
    """A lookup matched no active record."""


class AmbiguousMatchError(StatusHookError):
    """A lookup that must match exactly one record matched several."""

    def __init__(self, message: str, count: int):
        super().__init__(message)
        self.count = count
