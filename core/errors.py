"""Errors raised by fact providers."""

from __future__ import annotations


class ProviderUnavailable(RuntimeError):
    """The provider could not reach its source at all."""


class ItemReadFailure(RuntimeError):
    """Properties of one named entity could not be read."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason
