import inspect
from importlib import import_module
from types import ModuleType
from typing import TYPE_CHECKING, Any, Iterable, List, Union

from pico_ioc import init as _ioc_init

if TYPE_CHECKING:
    from pico_ioc import PicoContainer

_IOC_INIT_SIG = inspect.signature(_ioc_init)

# EventBus lives in pico_ioc itself; queues publish on it when present.
_BASE_MODULES = ("pico_ioc", "pico_workqueue")


def _as_list(modules: Union[Any, Iterable[Any], None]) -> List[Any]:
    if modules is None:
        return []
    if isinstance(modules, Iterable) and not isinstance(modules, (str, bytes)):
        return list(modules)
    return [modules]


def _resolve(obj: Any) -> ModuleType:
    if isinstance(obj, ModuleType):
        return obj
    if isinstance(obj, str):
        return import_module(obj)
    module_name = getattr(obj, "__module__", None)
    if not module_name:
        raise ImportError(f"Cannot determine module for object {obj!r}")
    return import_module(module_name)


def _with_base_modules(raw: Iterable[Any]) -> List[ModuleType]:
    seen: set[str] = set()
    result: List[ModuleType] = []
    for item in [*_BASE_MODULES, *raw]:
        m = _resolve(item)
        if m.__name__ not in seen:
            seen.add(m.__name__)
            result.append(m)
    return result


def init(*args: Any, **kwargs: Any) -> "PicoContainer":
    """``pico_ioc.init`` with ``pico_ioc`` and ``pico_workqueue`` always scanned."""
    bound = _IOC_INIT_SIG.bind(*args, **kwargs)
    bound.apply_defaults()
    bound.arguments["modules"] = _with_base_modules(_as_list(bound.arguments.get("modules")))
    return _ioc_init(*bound.args, **bound.kwargs)


init.__signature__ = _IOC_INIT_SIG
