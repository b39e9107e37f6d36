"""Handler registry: name -> handler object plus its capability table.

In the overall architecture: the server registers handler objects here before
``start()``; the dispatcher and the ``system`` handler read the tables built
at registration time instead of inspecting handlers on every call.
"""

from __future__ import annotations

import functools
import inspect
import threading
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from loguru import logger

from boxcar.protocol.values import wire_type_name
from boxcar.utils.exceptions import MethodError, RegistrationError

EXPOSED_ATTR = "__rpc_exposed__"
METHODS_ATTR = "__rpc_methods__"


def exposed(target: Any) -> Any:
    """Mark a handler class as exposure-restricted, or a method as exposed.

    A class carrying the marker only lets methods that carry it too be
    called remotely. Unmarked classes expose every public method.
    """
    setattr(target, EXPOSED_ATTR, True)
    return target


@dataclass(slots=True)
class MethodSpec:
    """One invocable method of a handler."""

    name: str
    func: Callable[..., Any]
    signature: inspect.Signature | None
    param_types: dict[str, Any] = field(default_factory=dict)
    return_type: Any = inspect.Signature.empty
    help: str | None = None

    def wire_signature(self) -> list[str]:
        """[return type, param types...] as wire type names."""
        names = [wire_type_name(_plain(self.return_type))]
        if self.signature is not None:
            for param in self.signature.parameters.values():
                if param.kind in (param.VAR_KEYWORD, param.KEYWORD_ONLY):
                    continue
                names.append(wire_type_name(_plain(self.param_types.get(param.name))))
        return names


@dataclass(slots=True)
class HandlerEntry:
    """A registered handler with its method table and exposure allow-list."""

    name: str
    handler: Any
    methods: dict[str, MethodSpec]
    exposed: frozenset[str]
    restricted: bool = False

    def is_exposed(self, method_name: str) -> bool:
        return method_name in self.exposed

    def exposed_methods(self) -> list[str]:
        return [name for name in self.methods if name in self.exposed]


def _plain(annotation: Any) -> Any:
    if annotation is None or annotation is inspect.Signature.empty:
        return typing.Any
    return annotation


def _type_hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception as e:
        logger.debug("Falling back to raw annotations for {}: {}", getattr(func, "__qualname__", func), e)
        return dict(getattr(func, "__annotations__", {}) or {})


def build_method_table(handler: Any) -> dict[str, MethodSpec]:
    """Collect the public routines of a handler into a name -> MethodSpec table."""
    table: dict[str, MethodSpec] = {}
    for attr in dir(handler):
        if attr.startswith("_"):
            continue
        static = inspect.getattr_static(handler, attr, None)
        if isinstance(static, (property, functools.cached_property)):
            continue
        member = getattr(handler, attr, None)
        if not inspect.isroutine(member):
            continue
        try:
            signature = inspect.signature(member)
        except (TypeError, ValueError):
            signature = None
        hints = _type_hints(member)
        table[attr] = MethodSpec(
            name=attr,
            func=member,
            signature=signature,
            param_types={k: v for k, v in hints.items() if k != "return"},
            return_type=hints.get("return", inspect.Signature.empty),
            help=inspect.getdoc(member),
        )
    return table


def _exposure(
    handler: Any,
    table: dict[str, MethodSpec],
    expose: Iterable[str] | None,
) -> tuple[frozenset[str], bool]:
    if expose is not None:
        names = frozenset(expose)
        unknown = sorted(names - table.keys())
        if unknown:
            raise RegistrationError(f"cannot expose unknown methods: {', '.join(unknown)}")
        return names, True
    if getattr(handler, EXPOSED_ATTR, False):
        marked = {name for name, spec in table.items() if getattr(spec.func, EXPOSED_ATTR, False)}
        return frozenset(marked), True
    listed = getattr(handler, METHODS_ATTR, None)
    if listed is not None:
        return frozenset(name for name in listed if name in table), True
    return frozenset(table), False


class MethodRegistry:
    """
    Registry of handler objects.

    Registration builds each handler's capability table once; lookups during
    dispatch are plain dict reads guarded by a lock so registration may run
    concurrently with serving.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, HandlerEntry] = {}
        self._help: dict[str, str] = {}
        self._lock = threading.RLock()

    def add(self, name: str, handler: Any, *, expose: Iterable[str] | None = None) -> HandlerEntry:
        """
        Register a handler under a unique single-segment name.

        Args:
            name: Dispatch name, the ``object`` part of ``object.method``.
            handler: Any object; its public routines become callable methods.
            expose: Optional explicit allow-list of method names. Without it
                the handler's ``@exposed`` markers or ``__rpc_methods__``
                decide, and otherwise every public method is exposed.

        Raises:
            RegistrationError: Invalid or duplicate name, or unknown names
                in ``expose``.
        """
        if not isinstance(name, str) or not name or "." in name:
            raise RegistrationError(f"invalid handler name: {name!r}", name=str(name))
        table = build_method_table(handler)
        allowed, restricted = _exposure(handler, table, expose)
        entry = HandlerEntry(name=name, handler=handler, methods=table, exposed=allowed, restricted=restricted)
        with self._lock:
            if name in self._handlers:
                raise RegistrationError(f"handler already registered: {name}", name=name)
            self._handlers[name] = entry
            for method_name, spec in table.items():
                if spec.help:
                    self._help.setdefault(f"{name}.{method_name}", spec.help)
        logger.debug("Registered handler {} ({} methods, {} exposed)", name, len(table), len(allowed))
        return entry

    def remove(self, name: str) -> bool:
        """Unregister a handler; return True if it was present."""
        with self._lock:
            entry = self._handlers.pop(name, None)
            if entry is None:
                return False
            prefix = f"{name}."
            for key in [k for k in self._help if k.startswith(prefix)]:
                del self._help[key]
        return True

    def get(self, name: str) -> HandlerEntry | None:
        with self._lock:
            return self._handlers.get(name)

    def resolve(self, object_name: str) -> HandlerEntry:
        """Look up a handler or raise a method fault naming the object."""
        entry = self.get(object_name)
        if entry is None:
            raise MethodError(f"Object {object_name} not found")
        return entry

    def entries(self) -> list[HandlerEntry]:
        with self._lock:
            return list(self._handlers.values())

    def set_help(self, qualified_name: str, text: str) -> None:
        with self._lock:
            self._help[qualified_name] = text

    def help_for(self, qualified_name: str) -> str | None:
        with self._lock:
            return self._help.get(qualified_name)

    def __getitem__(self, name: str) -> Any:
        entry = self.get(name)
        if entry is None:
            raise KeyError(name)
        return entry.handler

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._handlers))

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
