"""Hand-built multipart/form-data body.

The host expects text fields first and a single file part last, exactly as a
browser form submit lays them out.
"""

import uuid
from dataclasses import dataclass

CRLF = b"\r\n"


@dataclass(frozen=True)
class FilePart:
    """File field of a multipart body."""

    name: str
    filename: str
    content: bytes
    content_type: str = "audio/mpeg"


def new_boundary() -> str:
    return "----WebKitFormBoundary" + uuid.uuid4().hex[:16]


def build_multipart_body(
    fields: list[tuple[str, str]], file_part: FilePart, boundary: str | None = None
) -> tuple[bytes, str]:
    """Encode text fields followed by one file part.

    Returns:
        Tuple of (body bytes, Content-Type header value with boundary).
    """
    boundary = boundary or new_boundary()
    delimiter = f"--{boundary}".encode()
    chunks: list[bytes] = []

    for name, value in fields:
        chunks += [
            delimiter, CRLF,
            f'Content-Disposition: form-data; name="{name}"'.encode(), CRLF, CRLF,
            value.encode("utf-8"), CRLF,
        ]

    chunks += [
        delimiter, CRLF,
        (
            f'Content-Disposition: form-data; name="{file_part.name}"; '
            f'filename="{file_part.filename}"'
        ).encode("utf-8"), CRLF,
        f"Content-Type: {file_part.content_type}".encode(), CRLF, CRLF,
        file_part.content, CRLF,
        delimiter, b"--", CRLF,
    ]
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"
