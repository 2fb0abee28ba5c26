"""
Tests for restricted class synthesis.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from restrict_by_user import (
    RestrictedClassRegistry,
    RestrictedSourceMixin,
    RestrictionConfigError,
    ResultSource,
    Schema,
)


def test_synthesizes_subclass():
    registry = RestrictedClassRegistry(RestrictedSourceMixin)

    restricted = registry.get(ResultSource)

    assert issubclass(restricted, ResultSource)
    assert issubclass(restricted, RestrictedSourceMixin)
    assert restricted.__mro__[1] is RestrictedSourceMixin
    assert restricted.__name__ == "ResultSource__RestrictedByUser"
    assert restricted.__module__ == ResultSource.__module__
    assert restricted.__restricted_from__ is ResultSource


def test_synthesis_is_idempotent():
    registry = RestrictedClassRegistry(RestrictedSourceMixin)

    assert registry.get(ResultSource) is registry.get(ResultSource)
    assert len(registry) == 1
    assert ResultSource in registry


def test_one_class_per_concrete_type():
    class NoteSource(ResultSource):
        pass

    registry = RestrictedClassRegistry(RestrictedSourceMixin)

    assert registry.get(NoteSource) is not registry.get(ResultSource)
    assert issubclass(registry.get(NoteSource), NoteSource)
    assert len(registry) == 2


def test_restricted_class_maps_to_itself():
    registry = RestrictedClassRegistry(RestrictedSourceMixin)
    restricted = registry.get(ResultSource)

    assert registry.get(restricted) is restricted
    assert len(registry) == 1


def test_clear():
    registry = RestrictedClassRegistry(RestrictedSourceMixin)
    first = registry.get(ResultSource)

    registry.clear()

    assert len(registry) == 0
    assert registry.get(ResultSource) is not first


def test_concurrent_first_requests_share_one_class():
    registry = RestrictedClassRegistry(RestrictedSourceMixin)
    barrier = threading.Barrier(8)

    def get():
        barrier.wait()
        return registry.get(Schema)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: get(), range(8)))

    assert len({id(cls) for cls in results}) == 1
    assert registry.list_classes() == [results[0]]


def test_synthesis_failure_is_config_error():
    class FinalSource(ResultSource):
        def __init_subclass__(cls, **kwargs):
            raise TypeError("FinalSource cannot be subclassed")

    registry = RestrictedClassRegistry(RestrictedSourceMixin)

    with pytest.raises(RestrictionConfigError) as exc_info:
        registry.get(FinalSource)

    assert exc_info.value.target is FinalSource
    assert isinstance(exc_info.value.__cause__, TypeError)
    assert FinalSource not in registry


def test_list_classes_is_a_snapshot():
    registry = RestrictedClassRegistry(RestrictedSourceMixin)
    registry.get(ResultSource)

    snapshot = registry.list_classes()
    registry.get(Schema)

    assert len(snapshot) == 1
    assert len(registry.list_classes()) == 2
