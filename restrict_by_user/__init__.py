"""
restrict_by_user - Restrict every result set of a schema by user.

Define hooks on your user model:
================================

    class User(Base):
        __tablename__ = "users"
        ...

        # let's pretend a user has many notes, in source 'Note'
        def restrict_Note_resultset(self, unrestricted_rs):
            return unrestricted_rs.search(user_id=self.id)

Restrict a schema:
==================

    schema = Schema.from_base(session, Base)
    user = await schema.resultset("User").find(user_id)

    restricted = restrict(schema, user)       # or schema.restrict_by_user(user)
    notes = await restricted.resultset("Note").all()   # only this user's notes

Prefixes:
=========

    restricted = restrict(schema, user, "admin")

looks for restrict_admin_Note_resultset first, then restrict_Note_resultset,
and returns the result set unrestricted when neither exists.

Configuration:
==============

Environment variables (or .env):
- RESTRICT_HOOK_TEMPLATE: "restrict_{moniker}_resultset" (default)
- RESTRICT_PREFIXED_HOOK_TEMPLATE: "restrict_{prefix}_{moniker}_resultset" (default)
- RESTRICT_WRAP_HOOK_ERRORS: true (default)
- RESTRICT_LOG_LEVEL / RESTRICT_LOG_FORMAT
"""

from .applier import RestrictionApplier, default_applier, restrict
from .components import RestrictedSchemaMixin, RestrictedSourceMixin, RestrictionBinding
from .config import RestrictSettings, get_settings
from .exceptions import (
    RestrictionConfigError,
    RestrictionError,
    RestrictionHookError,
    UnknownMonikerError,
)
from .hooks import Hook, find_hook, hook_name, restricts
from .log import configure_logging
from .registry import RestrictedClassRegistry
from .schema import ResultSet, ResultSource, Schema

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "restrict",
    "RestrictionApplier",
    "default_applier",
    # Schema layer
    "Schema",
    "ResultSource",
    "ResultSet",
    # Hooks
    "Hook",
    "hook_name",
    "find_hook",
    "restricts",
    # Restricted classes
    "RestrictedSchemaMixin",
    "RestrictedSourceMixin",
    "RestrictionBinding",
    "RestrictedClassRegistry",
    # Config / logging
    "RestrictSettings",
    "get_settings",
    "configure_logging",
    # Errors
    "RestrictionError",
    "RestrictionConfigError",
    "RestrictionHookError",
    "UnknownMonikerError",
]
