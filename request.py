"""Request-line extraction from raw request bytes."""

from dataclasses import dataclass

from utils import decode_url_path


class RequestParseError(ValueError):
    """Raised when the method and path tokens cannot be located."""


@dataclass(frozen=True, slots=True)
class ParsedRequest:
    method: str
    path: str
    raw_bytes: bytes

    @classmethod
    def from_bytes(cls, raw: bytes) -> "ParsedRequest":
        """Split method and path on the first two spaces of the whole buffer.

        The buffer is scanned as a flat byte sequence, not line by line, and
        headers or body bytes after the path are left untouched.
        """
        first_space = raw.find(b" ")
        if first_space == -1:
            raise RequestParseError("Missing space after method")
        second_space = raw.find(b" ", first_space + 1)
        if second_space == -1:
            raise RequestParseError("Missing space after path")

        method = raw[:first_space].decode("iso-8859-1")
        raw_path = raw[first_space + 1 : second_space].decode("iso-8859-1")
        return cls(method=method, path=decode_url_path(raw_path), raw_bytes=raw)
