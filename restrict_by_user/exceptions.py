"""
Restriction errors.

- RestrictionConfigError: raised by restrict() when a restricted type
  cannot be built for a schema or source class
- RestrictionHookError: a user restriction hook raised
- UnknownMonikerError: schema has no source registered under a moniker
"""

from typing import Any


class RestrictionError(Exception):
    """Base class for all restriction errors."""


class RestrictionConfigError(RestrictionError):
    """Restricted class synthesis or re-typing failed."""

    def __init__(self, target: type, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(
            f"Cannot restrict {target.__module__}.{target.__qualname__}: {reason}"
        )


class RestrictionHookError(RestrictionError):
    """
    A restriction hook raised while resolving a result set.

    The original exception is kept on `original` and chained as __cause__.
    """

    def __init__(self, moniker: str, hook: str, original: BaseException):
        self.moniker = moniker
        self.hook = hook
        self.original = original
        super().__init__(
            f"Restriction hook '{hook}' failed for '{moniker}': {original!r}"
        )


class UnknownMonikerError(RestrictionError, KeyError):
    """No source registered under the requested moniker."""

    def __init__(self, moniker: str, available: list[Any]):
        self.moniker = moniker
        self.available = available
        super().__init__(moniker)

    def __str__(self) -> str:
        return f"Unknown source: '{self.moniker}'. Available: {self.available}"
