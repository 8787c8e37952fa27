"""Path and content-type helpers shared across server modules."""

import os

from config import FALLBACK_CONTENT_TYPE

# Common MIME types keyed by lowercase extension, in sorted order.
# https://developer.mozilla.org/en-US/docs/Web/HTTP/Basics_of_HTTP/MIME_types/Common_types
MIME_TABLE: dict[str, str] = {
    ".3g2": "video/3gpp2",
    ".3gp": "video/3gpp",
    ".7z": "application/x-7z-compressed",
    ".aac": "audio/aac",
    ".abw": "application/x-abiword",
    ".arc": "application/octet-stream",
    ".avi": "video/x-msvideo",
    ".azw": "application/vnd.amazon.ebook",
    ".bin": "application/octet-stream",
    ".bz": "application/x-bzip",
    ".bz2": "application/x-bzip2",
    ".csh": "application/x-csh",
    ".css": "text/css",
    ".csv": "text/csv",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".eot": "application/vnd.ms-fontobject",
    ".epub": "application/epub+zip",
    ".gif": "image/gif",
    ".htm": "text/html",
    ".html": "text/html",
    ".ico": "image/x-icon",
    ".ics": "text/calendar",
    ".jar": "application/java-archive",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".js": "application/javascript",
    ".json": "application/json",
    ".mid": "audio/midi",
    ".midi": "audio/midi",
    ".mpeg": "video/mpeg",
    ".mpkg": "application/vnd.apple.installer+xml",
    ".odp": "application/vnd.oasis.opendocument.presentation",
    ".ods": "application/vnd.oasis.opendocument.spreadsheet",
    ".odt": "application/vnd.oasis.opendocument.text",
    ".oga": "audio/ogg",
    ".ogv": "video/ogg",
    ".ogx": "application/ogg",
    ".otf": "font/otf",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".rar": "application/x-rar-compressed",
    ".rtf": "application/rtf",
    ".sh": "application/x-sh",
    ".svg": "image/svg+xml",
    ".swf": "application/x-shockwave-flash",
    ".tar": "application/x-tar",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".ts": "application/typescript",
    ".ttf": "font/ttf",
    ".vsd": "application/vnd.visio",
    ".wav": "audio/x-wav",
    ".weba": "audio/webm",
    ".webm": "video/webm",
    ".webp": "image/webp",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".xhtml": "application/xhtml+xml",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xml": "application/xml",
    ".xul": "application/vnd.mozilla.xul+xml",
    ".zip": "application/zip",
}

_HEX_DIGITS = "0123456789abcdefABCDEF"


def get_content_type(file_path: str) -> str:
    """Return the MIME type for the extension after the last dot, if known."""
    dot_index = file_path.rfind(".")
    if dot_index == -1:
        return FALLBACK_CONTENT_TYPE
    extension = file_path[dot_index:].lower()
    return MIME_TABLE.get(extension, FALLBACK_CONTENT_TYPE)


def decode_url_path(path: str) -> str:
    """Decode %XX escapes in a request path.

    Each character of ``path`` stands for one request byte (ISO-8859-1), and
    each decoded escape becomes one such character, so the result is never
    longer than the input. A ``%`` not followed by two hex digits is kept as
    literal text and scanning resumes right after it. A ``%`` with fewer than
    two characters left is dropped along with whatever follows it.
    """
    result: list[str] = []
    position = 0
    length = len(path)
    while position < length:
        char = path[position]
        if char != "%":
            result.append(char)
            position += 1
            continue

        if position + 2 >= length:
            break

        high, low = path[position + 1], path[position + 2]
        if high in _HEX_DIGITS and low in _HEX_DIGITS:
            result.append(chr(int(high + low, 16)))
            position += 3
        else:
            result.append("%")
            position += 1
    return "".join(result)


def is_safe_path(path: str) -> bool:
    """Accept only absolute request paths with no ``..`` anywhere in them."""
    if not path.startswith("/"):
        return False
    return ".." not in path


def resolve_target_path(root_directory: str, request_path: str) -> str:
    """Join the root and a decoded request path into a filesystem path.

    The request path carries raw request bytes as ISO-8859-1 characters, so
    it is turned back into bytes and decoded the way the OS expects.
    """
    return root_directory + os.fsdecode(request_path.encode("iso-8859-1"))
