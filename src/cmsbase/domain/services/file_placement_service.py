"""Placement of uploaded files on local disk.

Each uploaded file is written to the directory configured on the field whose
title equals the file's form field name. Writes overwrite any existing file of
the same name; concurrent writers to one path race and the last one wins.
"""

from pathlib import Path
from typing import Any, Iterable

from cmsbase.core.logging import get_logger
from cmsbase.domain.entities import CollectionDefinition, UploadedFile, UploadMetadata
from cmsbase.domain.services.field_resolver import require_field

logger = get_logger(__name__)


class FilePlacementService:
    """Writes request uploads where their field definitions point."""

    def __init__(self, upload_path: str | Path) -> None:
        """Initialize the service.

        Args:
            upload_path: Root for fields that declare no path of their own.
        """
        self.upload_path = Path(upload_path)

    def resolve_directory(self, collection: CollectionDefinition, field_name: str) -> Path:
        """Return the destination directory for uploads under ``field_name``.

        Raises:
            FieldNotFoundError: If the collection has no field with that title.
        """
        field = require_field(collection, field_name)
        if field.path:
            return Path(field.path)
        return self.upload_path / collection.name / field.title

    def plan_file(self, collection: CollectionDefinition, upload: UploadedFile) -> UploadMetadata:
        """Work out where ``upload`` goes without touching the disk.

        Raises:
            FieldNotFoundError: If the collection has no field with that title.
        """
        directory = self.resolve_directory(collection, upload.field_name)
        # Only the basename of a client-supplied filename is trusted.
        filename = Path(upload.filename).name or upload.field_name
        return UploadMetadata(
            field_name=upload.field_name,
            originalname=filename,
            mimetype=upload.mime_type,
            size=len(upload.content),
            path=str(directory / filename),
        )

    def plan_files(
        self, collection: CollectionDefinition, uploads: Iterable[UploadedFile]
    ) -> list[tuple[UploadedFile, UploadMetadata]]:
        """Resolve every upload's destination. Nothing is written.

        Raises:
            FieldNotFoundError: If an upload's field name matches no field.
        """
        return [(upload, self.plan_file(collection, upload)) for upload in uploads]

    def write_file(self, upload: UploadedFile, metadata: UploadMetadata) -> None:
        destination = Path(metadata.path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(upload.content)
        logger.info(
            "Upload written",
            field=upload.field_name,
            path=str(destination),
            size=metadata.size,
        )

    def write_files(self, planned: Iterable[tuple[UploadedFile, UploadMetadata]]) -> None:
        """Write planned uploads.

        Raises:
            OSError: If a directory or file cannot be written.
        """
        for upload, metadata in planned:
            self.write_file(upload, metadata)

    def save_file(self, collection: CollectionDefinition, upload: UploadedFile) -> UploadMetadata:
        metadata = self.plan_file(collection, upload)
        self.write_file(upload, metadata)
        return metadata

    def save_files(
        self, collection: CollectionDefinition, uploads: Iterable[UploadedFile]
    ) -> dict[str, dict[str, Any]]:
        """Write every upload and collect metadata keyed by field name.

        All destinations are resolved before the first write. When several
        files share a field name the last one's metadata is kept.

        Raises:
            FieldNotFoundError: If an upload's field name matches no field.
            OSError: If a directory or file cannot be written.
        """
        planned = self.plan_files(collection, uploads)
        self.write_files(planned)
        return metadata_by_field(planned)


def metadata_by_field(planned: Iterable[tuple[UploadedFile, UploadMetadata]]) -> dict[str, dict[str, Any]]:
    """Document values for planned uploads, keyed by field name."""
    return {metadata.field_name: metadata.to_dict() for _, metadata in planned}
