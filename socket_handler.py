"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket
from typing import BinaryIO

from config import FILE_CHUNK_SIZE, REQUEST_BUFFER_SIZE, REQUEST_TERMINATOR
from response import HTTPResponse


class TransportError(Exception):
    """Raised when the connection fails while reading or writing bytes."""


class IncompleteRequestError(TransportError):
    """Raised when the peer stops sending before the request terminator arrives."""


def send_all(client_socket: socket.socket, payload: bytes) -> int:
    """Send ``payload`` until every byte is accepted or the socket stalls.

    Returns the number of bytes sent, which is short of ``len(payload)`` only
    when the socket reports zero progress. Send errors raise TransportError.
    """
    view = memoryview(payload)
    total = len(view)
    sent = 0
    while sent < total:
        try:
            count = client_socket.send(view[sent:])
        except OSError as exc:
            raise TransportError(f"send failed after {sent} of {total} bytes") from exc
        if count == 0:
            break
        sent += count
    return sent


def recv_until(
    client_socket: socket.socket,
    capacity: int = REQUEST_BUFFER_SIZE,
    terminator: bytes = REQUEST_TERMINATOR,
) -> bytes:
    """Read until ``terminator`` is seen, ``capacity - 1`` bytes are held, or EOF."""
    limit = capacity - 1
    buffer = bytearray()
    while len(buffer) < limit:
        try:
            chunk = client_socket.recv(limit - len(buffer))
        except OSError as exc:
            raise TransportError("recv failed") from exc
        if not chunk:
            break

        search_from = max(0, len(buffer) - len(terminator) + 1)
        buffer.extend(chunk)
        if buffer.find(terminator, search_from) != -1:
            break
    return bytes(buffer)


def read_http_request(
    client_socket: socket.socket,
    capacity: int = REQUEST_BUFFER_SIZE,
) -> bytes:
    """Read one request head, accepting a full buffer even without a terminator."""
    buffer = recv_until(client_socket, capacity)
    if REQUEST_TERMINATOR not in buffer and len(buffer) < capacity - 1:
        raise IncompleteRequestError(
            f"Connection closed after {len(buffer)} bytes without request terminator"
        )
    return buffer


def write_http_response(client_socket: socket.socket, response: HTTPResponse) -> int:
    """Write a response head and return the number of bytes accepted."""
    return send_all(client_socket, response.head())


def stream_file(
    client_socket: socket.socket,
    file_obj: BinaryIO,
    *,
    chunk_size: int = FILE_CHUNK_SIZE,
) -> int:
    """Copy a file to the socket in bounded chunks, stopping at EOF or a short send."""
    bytes_sent = 0
    while True:
        chunk = file_obj.read(chunk_size)
        if not chunk:
            break
        sent = send_all(client_socket, chunk)
        bytes_sent += sent
        if sent < len(chunk):
            break
    return bytes_sent
