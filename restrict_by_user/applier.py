"""
Restriction applier - main entry point.

Usage:
    from restrict_by_user import restrict

    restricted = restrict(schema, user)             # restrict_<Moniker>_resultset
    restricted = restrict(schema, user, "admin")    # restrict_admin_<Moniker>_resultset first

    notes = await restricted.resultset("Notes").all()
"""

from typing import Any, Optional

import structlog

from .components import RestrictionBinding, schema_classes, source_classes
from .config import RestrictSettings, get_settings
from .exceptions import RestrictionConfigError
from .schema import Schema

logger = structlog.get_logger()


class RestrictionApplier:
    """
    Derives restricted copies of schemas.

    Settings are per applier. The registries of synthesized restricted
    classes are process-wide, so every applier hands out the same restricted
    class for a given concrete schema or source class.
    """

    def __init__(self, config: Optional[RestrictSettings] = None):
        self._config = config
        self.schema_classes = schema_classes
        self.source_classes = source_classes

    @property
    def config(self) -> RestrictSettings:
        return self._config or get_settings()

    def restricted_schema_class(self, target: type) -> type:
        """Restricted subclass for a schema class."""
        return self.schema_classes.get(target)

    def restricted_source_class(self, target: type) -> type:
        """Restricted subclass for a result source class."""
        return self.source_classes.get(target)

    def make_restricted(self, schema: Schema) -> Schema:
        """
        Re-type `schema` and each of its sources into restricted classes, in place.

        Every class is resolved before any instance is touched, so a
        synthesis failure leaves the schema as it was.

        Raises:
            RestrictionConfigError: If a restricted class cannot be built or assigned
        """
        schema_class = self.restricted_schema_class(type(schema))
        sources = [schema.source(moniker) for moniker in schema.sources()]
        source_classes = [self.restricted_source_class(type(source)) for source in sources]

        self._retype(schema, schema_class)
        for source, source_class in zip(sources, source_classes):
            self._retype(source, source_class)
        return schema

    def restrict(self, schema: Schema, user: Any, prefix: Optional[str] = None) -> Schema:
        """
        Restricted copy of `schema` for `user`.

        The copy shares the session and monikers of `schema`. Each result set
        it hands out goes through restrict_<prefix>_<Moniker>_resultset or
        restrict_<Moniker>_resultset on `user` when one exists, and is
        returned unrestricted otherwise. prefix=None skips the prefixed
        lookup; any string, even "", is used.

        Raises:
            RestrictionConfigError: If the schema or a source class cannot be restricted
        """
        copy = schema.clone()
        self.make_restricted(copy)
        copy.bind_restriction(RestrictionBinding(user=user, prefix=prefix, config=self.config))

        logger.info(
            "schema_restricted",
            schema=type(schema).__name__,
            sources=len(copy.sources()),
            prefix=prefix,
        )
        return copy

    @staticmethod
    def _retype(instance: Any, restricted: type) -> None:
        if type(instance) is restricted:
            return
        try:
            instance.__class__ = restricted
        except TypeError as exc:
            raise RestrictionConfigError(type(instance), str(exc)) from exc


# Process-wide applier used by restrict() and Schema.restrict_by_user()
default_applier = RestrictionApplier()


def restrict(schema: Schema, user: Any, prefix: Optional[str] = None) -> Schema:
    """Restrict `schema` for `user` with the default applier."""
    return default_applier.restrict(schema, user, prefix)
