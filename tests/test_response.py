"""Unit tests for response head serialization."""

from response import HTTPResponse, access_denied, file_not_found, file_response


def test_file_response_head_lists_headers_in_order() -> None:
    raw = file_response("text/html", 9).head()

    assert raw == (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/html\r\n"
        b"Content-Length: 9\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


def test_access_denied_is_bodyless() -> None:
    assert access_denied().head() == (
        b"HTTP/1.1 403 Access Denied\r\nContent-Length: 0\r\nConnection: close\r\n\r\n"
    )


def test_file_not_found_is_bodyless() -> None:
    assert file_not_found().head() == (
        b"HTTP/1.1 404 Not Found\r\nContent-Length: 0\r\nConnection: close\r\n\r\n"
    )


def test_unknown_status_gets_placeholder_reason() -> None:
    assert HTTPResponse(status_code=599).head().startswith(b"HTTP/1.1 599 Unknown\r\n")
