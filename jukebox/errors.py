"""Exception types raised across the jukebox backend."""

from __future__ import annotations


class JukeboxError(Exception):
    """Base class for jukebox failures."""


class CatalogUnavailable(JukeboxError):
    """Storage could not answer a query after bounded retries."""

    def __init__(self, operation: str, attempts: int, cause: BaseException | None = None):
        self.operation = operation
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"catalog query '{operation}' failed after {attempts} attempt(s): {cause}")


__all__ = ["JukeboxError", "CatalogUnavailable"]
