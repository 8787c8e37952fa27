"""Configuration constants for the tiny file server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plugin import Plugin

HOST: str = "0.0.0.0"
PORT: int = 8080
REQUEST_BUFFER_SIZE: int = 10_000
FILE_CHUNK_SIZE: int = 10_000
REQUEST_TERMINATOR: bytes = b"\r\n\r\n"
FALLBACK_CONTENT_TYPE: str = "application/octet-stream"
LISTEN_BACKLOG: int = 128
ACCEPT_POLL_SECS: float = 0.2
LOG_FORMAT: str = "plain"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Read-only settings shared by every connection handler."""

    root_directory: str
    plugin: Plugin | None = None

    @classmethod
    def from_root(cls, root_directory: str, plugin: Plugin | None = None) -> "ServerConfig":
        # Request paths always start with "/", so one trailing separator is dropped.
        return cls(root_directory=root_directory.removesuffix("/"), plugin=plugin)
