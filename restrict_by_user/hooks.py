"""
Restriction hook naming and lookup.

A user object restricts the result set of a moniker by exposing a method
named after it:

    class User(Base):
        def restrict_Notes_resultset(self, unrestricted_rs):
            return unrestricted_rs.search(user_id=self.id)

or, under any name, with the decorator:

    class User(Base):
        @restricts("Notes", prefix="admin")
        def admin_notes(self, unrestricted_rs):
            return unrestricted_rs

The decorator records the (moniker, prefix) pair on the class, so find_hook
sees it under any hook template, and also publishes the method under its
default conventional name (restrict_admin_Notes_resultset above).
"""

from typing import Any, Callable, NamedTuple, Optional

from .config import RestrictSettings, get_settings


class Hook(NamedTuple):
    """A restriction hook found on a user object."""
    name: str
    func: Callable[[Any], Any]


def hook_name(
    moniker: str,
    prefix: Optional[str] = None,
    config: Optional[RestrictSettings] = None,
) -> str:
    """
    Conventional hook method name for a moniker.

    prefix=None gives the unprefixed name. Any string, including "",
    gives the prefixed name.
    """
    config = config or get_settings()
    if prefix is None:
        return config.hook_template.format(moniker=moniker)
    return config.prefixed_hook_template.format(prefix=prefix, moniker=moniker)


def declared_hook(user: Any, moniker: str, prefix: Optional[str] = None) -> Optional[Callable[[Any], Any]]:
    """Method declared with @restricts(moniker, prefix) on the user's class, or None."""
    for klass in type(user).__mro__:
        declared = klass.__dict__.get("__restriction_hooks__")
        if declared and (moniker, prefix) in declared:
            return getattr(user, declared[(moniker, prefix)], None)
    return None


def find_hook(
    user: Any,
    moniker: str,
    prefix: Optional[str] = None,
    config: Optional[RestrictSettings] = None,
) -> Optional[Hook]:
    """
    First restriction hook exposed by `user` for `moniker`, or None.

    Looked up fresh on every call: hooks added to or removed from the user
    object later are honoured.
    """
    if user is None:
        return None
    steps = [prefix, None] if prefix is not None else [None]
    for step in steps:
        name = hook_name(moniker, step, config)
        func = getattr(user, name, None)
        if not callable(func):
            func = declared_hook(user, moniker, step)
        if callable(func):
            return Hook(name, func)
    return None


class restricts:
    """
    Decorator declaring a method as the restriction hook for a moniker.

    Usage:
        class User(Base):
            @restricts("Notes")
            def own_notes(self, unrestricted_rs):
                return unrestricted_rs.search(user_id=self.id)
    """

    def __init__(self, moniker: str, prefix: Optional[str] = None):
        self.moniker = moniker
        self.prefix = prefix
        self.func: Optional[Callable[..., Any]] = None

    def __call__(self, func: Callable[..., Any]) -> "restricts":
        self.func = func
        return self

    def __set_name__(self, owner: type, name: str) -> None:
        if self.func is None:
            raise TypeError(f"@restricts({self.moniker!r}) must decorate a method")
        setattr(owner, name, self.func)

        # found by find_hook whatever the hook templates are
        if "__restriction_hooks__" not in owner.__dict__:
            owner.__restriction_hooks__ = {}
        owner.__restriction_hooks__[(self.moniker, self.prefix)] = name

        conventional = hook_name(self.moniker, self.prefix)
        if conventional != name:
            setattr(owner, conventional, self.func)
