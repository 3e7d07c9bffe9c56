from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(filename: str, content_type: str | None = None) -> str:
    """Infer a best-effort content type from the file extension."""

    return content_type or mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class MediaFile:
    """A named binary attachment to upload next to a document body."""

    name: str
    body: bytes = field(repr=False)
    content_type: str | None = None

    @property
    def resolved_content_type(self) -> str:
        return guess_content_type(self.name, self.content_type)

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        *,
        name: str | None = None,
        content_type: str | None = None,
    ) -> MediaFile:
        path = Path(path)
        return cls(name=name or path.name, body=path.read_bytes(), content_type=content_type)
