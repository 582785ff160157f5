import pytest
from pico_ioc import PicoContainer

import pico_workqueue
from pico_workqueue.bootstrap import _as_list, _resolve, _with_base_modules, init


class TestAsList:
    def test_none_is_empty(self):
        assert _as_list(None) == []

    def test_list_passthrough(self):
        assert _as_list(["a", "b"]) == ["a", "b"]

    def test_single_item_wrapped(self):
        assert _as_list("mymodule") == ["mymodule"]

    def test_module_object_wrapped(self):
        assert _as_list(pico_workqueue) == [pico_workqueue]


class TestResolve:
    def test_module_object(self):
        assert _resolve(pico_workqueue) is pico_workqueue

    def test_string_import(self):
        assert _resolve("pico_workqueue") is pico_workqueue

    def test_object_resolves_to_its_module(self):
        assert _resolve(pico_workqueue.WorkQueue).__name__ == "pico_workqueue.queue"

    def test_missing_module_raises(self):
        with pytest.raises(ImportError):
            _resolve("pico_workqueue_missing_module")


class TestWithBaseModules:
    def test_base_modules_first(self):
        names = [m.__name__ for m in _with_base_modules(["os"])]
        assert names == ["pico_ioc", "pico_workqueue", "os"]

    def test_deduplicates(self):
        names = [m.__name__ for m in _with_base_modules(["pico_workqueue", pico_workqueue])]
        assert names.count("pico_workqueue") == 1


class TestInit:
    def test_returns_container(self):
        assert isinstance(init(modules=[]), PicoContainer)

    def test_package_level_init(self):
        assert isinstance(pico_workqueue.init(modules=[pico_workqueue]), PicoContainer)
