"""Uploaded file transport objects."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """A file submitted with a request, already read into memory."""

    field_name: str
    filename: str
    mime_type: str
    content: bytes


@dataclass(frozen=True, slots=True)
class UploadMetadata:
    """What a document keeps about an uploaded file. Never the bytes."""

    field_name: str
    originalname: str
    mimetype: str
    size: int
    path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalname": self.originalname,
            "mimetype": self.mimetype,
            "size": self.size,
            "path": self.path,
        }
