"""
Registry of synthesized restricted classes.

Each concrete schema or source class gets exactly one restricted subclass
per registry, built on first use and reused afterwards:

    registry = RestrictedClassRegistry(RestrictedSourceMixin)
    registry.get(ResultSource)  # ResultSource__RestrictedByUser
    registry.get(ResultSource)  # same class object
"""

import threading
from typing import Any

import structlog

from .exceptions import RestrictionConfigError

logger = structlog.get_logger()

RESTRICTED_SUFFIX = "__RestrictedByUser"


class RestrictedClassRegistry:
    """
    Thread-safe map from original class to its restricted subclass.

    Reads are lock-free; synthesis happens under a lock so concurrent
    first requests for one class still produce a single subclass.
    """

    def __init__(self, mixin: type):
        self.mixin = mixin
        self._classes: dict[type, type] = {}
        self._lock = threading.Lock()

    def __contains__(self, target: Any) -> bool:
        return target in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def get(self, target: type) -> type:
        """
        Restricted subclass of `target`, synthesized on first request.

        An already restricted class is returned as-is.

        Raises:
            RestrictionConfigError: If the subclass cannot be built
        """
        if issubclass(target, self.mixin):
            return target

        restricted = self._classes.get(target)
        if restricted is not None:
            return restricted

        with self._lock:
            restricted = self._classes.get(target)
            if restricted is None:
                restricted = self._synthesize(target)
                self._classes[target] = restricted
        return restricted

    def list_classes(self) -> list[type]:
        """Snapshot of the synthesized classes; later synthesis is not reflected."""
        with self._lock:
            return list(self._classes.values())

    def clear(self) -> None:
        """Forget every synthesized class."""
        with self._lock:
            self._classes.clear()

    def _synthesize(self, target: type) -> type:
        namespace = {
            "__module__": target.__module__,
            "__qualname__": target.__qualname__ + RESTRICTED_SUFFIX,
            "__doc__": target.__doc__,
            "__restricted_from__": target,
        }
        try:
            restricted = type(target.__name__ + RESTRICTED_SUFFIX, (self.mixin, target), namespace)
        except Exception as exc:
            raise RestrictionConfigError(target, str(exc)) from exc

        logger.debug(
            "restricted_class_synthesized",
            target=f"{target.__module__}.{target.__qualname__}",
            restricted=restricted.__name__,
        )
        return restricted
