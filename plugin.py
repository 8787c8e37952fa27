"""Plugin contract for intercepting "magic" request paths."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from request import ParsedRequest

ResponseBuilder = Callable[[bytes], bytes]


@runtime_checkable
class Plugin(Protocol):
    """A plugin claims request paths and answers them with raw response bytes.

    ``process_request`` receives the whole buffered request and must return a
    complete HTTP response, status line and headers included. The server
    sends it verbatim and closes the connection.
    """

    def claims_path(self, path: str) -> bool: ...

    def process_request(self, raw_request: bytes) -> bytes: ...


class MagicPathPlugin:
    """Plugin that claims an exact set of decoded paths."""

    def __init__(self) -> None:
        self._builders: dict[str, ResponseBuilder] = {}

    def add_path(self, path: str, builder: ResponseBuilder) -> None:
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        self._builders[path] = builder

    def claims_path(self, path: str) -> bool:
        return path in self._builders

    def process_request(self, raw_request: bytes) -> bytes:
        path = ParsedRequest.from_bytes(raw_request).path
        builder = self._builders.get(path)
        if builder is None:
            raise LookupError(f"no builder registered for {path!r}")
        return builder(raw_request)


def load_plugin(reference: str) -> Plugin:
    """Import a plugin from ``module:attribute``.

    A class attribute is instantiated with no arguments; anything else is
    used as the plugin instance.
    """
    module_name, separator, attribute = reference.partition(":")
    if not separator or not module_name or not attribute:
        raise ValueError(f"plugin reference must look like 'module:attribute', got {reference!r}")

    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attribute)
    except AttributeError as exc:
        raise ValueError(f"module {module_name!r} has no attribute {attribute!r}") from exc

    plugin = target() if isinstance(target, type) else target
    if not isinstance(plugin, Plugin):
        raise TypeError(f"{reference!r} does not provide claims_path/process_request")
    return plugin
