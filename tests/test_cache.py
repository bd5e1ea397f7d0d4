"""Descriptor cache tests."""

import threading

import pytest

from ducktype import DescriptorCache, TypeDescriptor


class Widget:
    pass


class Gadget:
    pass


def test_get_or_build_builds_once():
    cache = DescriptorCache()
    calls: list[type] = []

    def build(cls: type) -> TypeDescriptor:
        calls.append(cls)
        return TypeDescriptor(type_name=cls.__name__)

    first = cache.get_or_build(Widget, build)
    second = cache.get_or_build(Widget, build)
    assert first is second
    assert calls == [Widget]
    assert cache.get(Widget) is first
    assert cache.get(Gadget) is None
    assert Widget in cache
    assert Gadget not in cache
    assert len(cache) == 1


def test_classes_with_the_same_name_get_separate_entries():
    def make() -> type:
        class Twin:
            pass

        return Twin

    a = make()
    b = make()
    cache = DescriptorCache()
    da = cache.get_or_build(a, lambda cls: TypeDescriptor(type_name="a"))
    db = cache.get_or_build(b, lambda cls: TypeDescriptor(type_name="b"))
    assert da.type_name == "a"
    assert db.type_name == "b"
    assert len(cache) == 2


def test_concurrent_first_build():
    cache = DescriptorCache()
    calls: list[type] = []
    barrier = threading.Barrier(8)
    results: list[TypeDescriptor] = []
    results_lock = threading.Lock()

    def build(cls: type) -> TypeDescriptor:
        calls.append(cls)
        return TypeDescriptor(type_name=cls.__name__)

    def worker() -> None:
        barrier.wait()
        desc = cache.get_or_build(Widget, build)
        with results_lock:
            results.append(desc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert calls == [Widget]
    assert len(results) == 8
    for desc in results:
        assert desc is results[0]


def test_failed_build_is_not_cached():
    cache = DescriptorCache()

    def broken(cls: type) -> TypeDescriptor:
        raise TypeError("cannot describe " + cls.__name__)

    with pytest.raises(TypeError):
        cache.get_or_build(Widget, broken)
    assert Widget not in cache
    desc = cache.get_or_build(Widget, lambda cls: TypeDescriptor(type_name="ok"))
    assert desc.type_name == "ok"
