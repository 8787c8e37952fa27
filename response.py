"""HTTP response head serializer and the fixed error responses."""

from dataclasses import dataclass

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    403: "Access Denied",
    404: "Not Found",
}


@dataclass(frozen=True, slots=True)
class HTTPResponse:
    """Status line plus the three headers the server ever emits.

    The body is never held here; file bytes are streamed after ``head()``.
    """

    status_code: int
    content_length: int = 0
    content_type: str | None = None

    @property
    def reason_phrase(self) -> str:
        return REASON_PHRASES.get(self.status_code, "Unknown")

    def head(self) -> bytes:
        """Serialize the status line and headers, ending with the blank line."""
        header_lines = [f"HTTP/1.1 {self.status_code} {self.reason_phrase}"]
        if self.content_type is not None:
            header_lines.append(f"Content-Type: {self.content_type}")
        header_lines.append(f"Content-Length: {self.content_length}")
        header_lines.append("Connection: close")
        return "\r\n".join(header_lines).encode("iso-8859-1") + b"\r\n\r\n"


def file_response(content_type: str, file_size: int) -> HTTPResponse:
    return HTTPResponse(status_code=200, content_length=file_size, content_type=content_type)


def access_denied() -> HTTPResponse:
    return HTTPResponse(status_code=403)


def file_not_found() -> HTTPResponse:
    return HTTPResponse(status_code=404)
