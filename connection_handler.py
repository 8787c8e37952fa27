"""Per-connection pipeline: read, parse, plugin dispatch, validate, serve."""

from __future__ import annotations

import json
import logging
import os
import socket
import stat
import time
from dataclasses import dataclass

from config import LOG_FORMAT, REQUEST_BUFFER_SIZE, ServerConfig
from plugin import Plugin
from request import ParsedRequest, RequestParseError
from response import HTTPResponse, access_denied, file_not_found, file_response
from socket_handler import (
    TransportError,
    read_http_request,
    send_all,
    stream_file,
    write_http_response,
)
from utils import get_content_type, is_safe_path, resolve_target_path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ConnectionOutcome:
    """What happened on one connection, recorded for the access log."""

    method: str = "-"
    path: str = "-"
    status_code: int | None = None
    bytes_in: int = 0
    bytes_out: int = 0
    intercepted: bool = False
    error: str | None = None


class ConnectionHandler:
    """Answers exactly one request per connection and then closes it.

    A single instance is shared by every connection thread; it holds nothing
    but the read-only configuration.
    """

    def __init__(
        self,
        config: ServerConfig,
        *,
        request_buffer_size: int = REQUEST_BUFFER_SIZE,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.config = config
        self.request_buffer_size = request_buffer_size
        self.log_format = log_format

    def handle(self, client_socket: socket.socket, address: tuple[str, int]) -> ConnectionOutcome:
        started_at = time.perf_counter()
        outcome = ConnectionOutcome()
        with client_socket:
            try:
                self._process(client_socket, outcome)
            except TransportError as exc:
                outcome.error = str(exc)
                logger.debug("Transport failure for client %s: %s", address[0], exc)
            except Exception:
                outcome.error = "internal error"
                logger.exception("Unhandled error while serving client %s", address[0])
        self._record_and_log(address, outcome, started_at)
        return outcome

    def _process(self, client_socket: socket.socket, outcome: ConnectionOutcome) -> None:
        raw_request = read_http_request(client_socket, self.request_buffer_size)
        outcome.bytes_in = len(raw_request)

        try:
            request = ParsedRequest.from_bytes(raw_request)
        except RequestParseError as exc:
            outcome.error = str(exc)
            logger.debug("Dropping malformed request: %s", exc)
            return

        outcome.method = request.method
        outcome.path = request.path

        plugin = self.config.plugin
        if plugin is not None and plugin.claims_path(request.path):
            self._dispatch_to_plugin(client_socket, plugin, request, outcome)
            return

        if request.method != "GET" or not is_safe_path(request.path):
            logger.debug("Refusing %s %r", request.method, request.path)
            self._send_bodyless(client_socket, access_denied(), outcome)
            return

        self._serve_file(client_socket, request, outcome)

    def _dispatch_to_plugin(
        self,
        client_socket: socket.socket,
        plugin: Plugin,
        request: ParsedRequest,
        outcome: ConnectionOutcome,
    ) -> None:
        outcome.intercepted = True
        try:
            payload = plugin.process_request(request.raw_bytes)
        except Exception:
            outcome.error = "plugin error"
            logger.exception("Plugin failed to process %r", request.path)
            return

        outcome.status_code = _status_code_of(payload)
        outcome.bytes_out = send_all(client_socket, payload)

    def _serve_file(
        self,
        client_socket: socket.socket,
        request: ParsedRequest,
        outcome: ConnectionOutcome,
    ) -> None:
        try:
            full_path = resolve_target_path(self.config.root_directory, request.path)
            logger.debug("Resolved %r to %s", request.path, full_path)
            file_descriptor = os.open(full_path, os.O_RDONLY)
        except (OSError, ValueError) as exc:
            logger.debug("Cannot open %r: %s", request.path, exc)
            self._send_bodyless(client_socket, file_not_found(), outcome)
            return

        file_size = _file_size(file_descriptor)
        if file_size == -1:
            os.close(file_descriptor)
            logger.debug("Refusing directory %r", request.path)
            self._send_bodyless(client_socket, access_denied(), outcome)
            return

        with os.fdopen(file_descriptor, "rb") as file_obj:
            response = file_response(get_content_type(request.path), file_size)
            head = response.head()
            outcome.status_code = response.status_code
            outcome.bytes_out = send_all(client_socket, head)
            if outcome.bytes_out < len(head):
                return
            try:
                outcome.bytes_out += stream_file(client_socket, file_obj)
            except OSError as exc:
                outcome.error = f"file read failed: {exc}"
                logger.warning("Stopped streaming %r: %s", request.path, exc)

    def _send_bodyless(
        self,
        client_socket: socket.socket,
        response: HTTPResponse,
        outcome: ConnectionOutcome,
    ) -> None:
        outcome.status_code = response.status_code
        outcome.bytes_out = write_http_response(client_socket, response)

    def _record_and_log(
        self,
        address: tuple[str, int],
        outcome: ConnectionOutcome,
        started_at: float,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event = {
            "client": address[0],
            "method": outcome.method,
            "path": outcome.path,
            "status": outcome.status_code if outcome.status_code is not None else "-",
            "bytes_in": outcome.bytes_in,
            "bytes_out": outcome.bytes_out,
            "intercepted": outcome.intercepted,
            "latency_ms": round(duration_ms, 3),
        }
        if outcome.error is not None:
            event["error"] = outcome.error

        if self.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            (
                "client=%s method=%s path=%s status=%s bytes_in=%s bytes_out=%s "
                "intercepted=%s duration_ms=%.2f"
            ),
            event["client"],
            event["method"],
            event["path"],
            event["status"],
            event["bytes_in"],
            event["bytes_out"],
            event["intercepted"],
            duration_ms,
        )


def _file_size(file_descriptor: int) -> int:
    """Return the size of an open file, or -1 when it is a directory."""
    file_stat = os.fstat(file_descriptor)
    if stat.S_ISDIR(file_stat.st_mode):
        return -1
    return file_stat.st_size


def _status_code_of(payload: bytes) -> int | None:
    status_line = payload.split(b"\r\n", 1)[0]
    parts = status_line.split(b" ", 2)
    if len(parts) >= 2 and parts[1].isdigit():
        return int(parts[1])
    return None
