"""
Restriction behaviour layered onto schema and source classes.

RestrictionApplier synthesizes subclasses of the form

    class Note__RestrictedByUser(RestrictedSourceMixin, ResultSource): ...

so these mixins take precedence over the original class and fall back to it
through super().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from .config import RestrictSettings
from .exceptions import RestrictionHookError
from .hooks import find_hook
from .registry import RestrictedClassRegistry

logger = structlog.get_logger()


@dataclass(frozen=True)
class RestrictionBinding:
    """
    User and prefix bound to a restricted schema.

    Created once by restrict() and never modified afterwards.
    """
    user: Any
    prefix: Optional[str]
    config: RestrictSettings


class RestrictedSchemaMixin:
    """Schema side: carries the binding, resolves through restricted sources."""

    _restriction: Optional[RestrictionBinding] = None

    @property
    def restriction(self) -> Optional[RestrictionBinding]:
        return self._restriction

    @property
    def user(self) -> Any:
        return self._restriction.user if self._restriction else None

    @property
    def restricted_prefix(self) -> Optional[str]:
        return self._restriction.prefix if self._restriction else None

    def bind_restriction(self, binding: RestrictionBinding) -> None:
        self._restriction = binding

    def _make_source(self, model: type, moniker: str) -> Any:
        # sources registered after restriction are restricted too
        return source_classes.get(self.source_class)(self, model, moniker)

    def resolve_resultset(self, moniker: str) -> Any:
        """Result set for `moniker`, restricted when the user has a hook."""
        return self.resultset(moniker)

    def unrestricted_resultset(self, moniker: str) -> Any:
        return self.source(moniker).unrestricted_resultset()


class RestrictedSourceMixin:
    """Source side: routes resultset() through the user's hook."""

    def unrestricted_resultset(self) -> Any:
        return super().resultset()

    def resultset(self) -> Any:
        unrestricted = self.unrestricted_resultset()

        binding = getattr(self.schema, "restriction", None)
        if binding is None:
            return unrestricted

        hook = find_hook(binding.user, self.moniker, binding.prefix, binding.config)
        if hook is None:
            logger.debug("resultset_unrestricted", moniker=self.moniker)
            return unrestricted

        try:
            restricted = hook.func(unrestricted)
        except Exception as exc:
            logger.error(
                "restriction_hook_failed",
                moniker=self.moniker,
                hook=hook.name,
                error=repr(exc),
            )
            if binding.config.wrap_hook_errors:
                raise RestrictionHookError(self.moniker, hook.name, exc) from exc
            raise

        logger.debug("resultset_restricted", moniker=self.moniker, hook=hook.name)
        return restricted


# Process-wide: one restricted class per concrete schema or source class,
# shared by every RestrictionApplier
schema_classes = RestrictedClassRegistry(RestrictedSchemaMixin)
source_classes = RestrictedClassRegistry(RestrictedSourceMixin)
