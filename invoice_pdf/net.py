"""Transport helpers: disconnect detection and multipart form decoding."""

from __future__ import annotations

import errno
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from python_multipart import create_form_parser
from python_multipart.exceptions import FormParserError
from python_multipart.multipart import Field, File

DISCONNECT_ERRNOS = {
    errno.EPIPE,
    errno.ECONNRESET,
    errno.ECONNABORTED,
    errno.ETIMEDOUT,
}
if hasattr(errno, "WSAECONNRESET"):
    DISCONNECT_ERRNOS.add(errno.WSAECONNRESET)  # pragma: no cover


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, ConnectionAbortedError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


class MultipartError(ValueError):
    """Raised when a request body is not usable multipart/form-data."""


@dataclass
class FormData:
    fields: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, List[bytes]] = field(default_factory=dict)


def _field_name(raw: Optional[bytes]) -> str:
    if not raw:
        return ""
    return raw.decode("utf-8", errors="replace")


def parse_multipart(content_type: str, body: bytes) -> FormData:
    """Split a ``multipart/form-data`` body into text fields and file uploads.

    Parts carrying a ``filename`` are uploads; the rest are text fields
    decoded as UTF-8. A repeated text field keeps its first value.
    """
    if not content_type.lower().startswith("multipart/form-data"):
        raise MultipartError("Content-Type must be multipart/form-data.")
    if "boundary=" not in content_type.lower():
        raise MultipartError("multipart/form-data boundary is missing.")

    form = FormData()
    raw_fields: List[Tuple[str, bytes]] = []

    def on_field(part: Field) -> None:
        raw_fields.append((_field_name(part.field_name), part.value or b""))

    def on_file(part: File) -> None:
        name = _field_name(part.field_name)
        upload = part.file_object
        upload.seek(0)
        form.files.setdefault(name, []).append(upload.read())
        part.close()

    # Keep every upload in memory; the body is already fully buffered.
    config = {"MAX_MEMORY_FILE_SIZE": len(body) + 1}
    try:
        parser = create_form_parser({"Content-Type": content_type}, on_field, on_file, config=config)
        parser.write(body)
        parser.finalize()
    except FormParserError as exc:
        raise MultipartError(f"Request body is not valid multipart/form-data: {exc}") from exc

    for name, value in raw_fields:
        if not name or name in form.fields:
            continue
        try:
            form.fields[name] = value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MultipartError(f"Field '{name}' is not valid utf-8 text.") from exc
    form.files.pop("", None)
    return form
