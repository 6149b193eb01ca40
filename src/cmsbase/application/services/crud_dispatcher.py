"""Generic document operations addressed by collection name.

The dispatcher resolves the collection against the registry, turns request
payloads into storable documents (coercion, file placement, validation) and
delegates persistence to the document repository. Multipart inserts that
carry ``crop_left`` are routed to the image redaction pipeline instead.
"""

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from cmsbase.core.config import Settings, get_settings
from cmsbase.core.logging import get_logger
from cmsbase.domain.entities import (
    BlurArea,
    CollectionDefinition,
    CropBounds,
    RedactionRequest,
    UploadedFile,
)
from cmsbase.domain.services import (
    DocumentValidationError,
    DocumentValidator,
    FilePlacementService,
    ImageRedactionService,
    QueryError,
    RedactionError,
    SchemaRegistry,
    coerce_form_data,
    metadata_by_field,
    parse_query,
    present_document,
)
from cmsbase.domain.services.image_redaction_service import OUTPUT_MIME_TYPE
from cmsbase.infrastructure.persistence.repositories import DocumentRepository

logger = get_logger(__name__)

REDACTION_TRIGGER = "crop_left"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class WritePayload:
    """A request body split into text fields and uploaded files.

    Attributes:
        fields: Submitted non-file values.
        files: Uploaded files in submission order.
        is_form: True for multipart/urlencoded bodies, whose values arrive
            as text and are coerced before use.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    files: list[UploadedFile] = field(default_factory=list)
    is_form: bool = True


def parse_page_param(raw: Any, default: int | None) -> int | None:
    """Parse a positive integer query parameter leniently.

    Leading digits are used (``"3rd"`` gives 3); anything missing,
    non-numeric or not positive yields ``default``.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return default
    value = int(match.group(1))
    return value if value > 0 else default


def parse_ids(raw: Any) -> list[str]:
    """Read the ``ids`` of a delete request.

    Raises:
        QueryError: If ``raw`` is neither a list nor a JSON-encoded array.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise QueryError(f"ids must be a JSON array: {e}") from e
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise QueryError("ids must be an array")
    return [str(item) for item in raw]


def _number(fields: Mapping[str, Any], key: str, default: float | None = None) -> float:
    value = fields.get(key)
    if value is None or value == "":
        if default is None:
            raise RedactionError(f"Missing redaction parameter '{key}'")
        return default
    if isinstance(value, bool):
        raise RedactionError(f"Redaction parameter '{key}' must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise RedactionError(f"Redaction parameter '{key}' must be a number") from None


def parse_redaction_request(fields: Mapping[str, Any]) -> RedactionRequest:
    """Build a redaction request from submitted (already coerced) fields.

    Raises:
        RedactionError: On missing or non-numeric parameters.
    """
    areas_raw = fields.get("blur_areas") or []
    if isinstance(areas_raw, str):
        try:
            areas_raw = json.loads(areas_raw)
        except ValueError as e:
            raise RedactionError(f"blur_areas must be a JSON array: {e}") from e
    if isinstance(areas_raw, dict):
        areas_raw = [areas_raw]
    if not isinstance(areas_raw, list):
        raise RedactionError("blur_areas must be an array")

    areas = []
    for area in areas_raw:
        if not isinstance(area, Mapping):
            raise RedactionError("Each blur area must be an object")
        areas.append(
            BlurArea(
                left=round(_number(area, "left")),
                top=round(_number(area, "top")),
                width=round(_number(area, "width")),
                height=round(_number(area, "height")),
            )
        )

    region_frame = fields.get("region_frame") or "canvas"
    if region_frame not in ("canvas", "rotated"):
        raise RedactionError("region_frame must be 'canvas' or 'rotated'")

    name = fields.get("name")
    return RedactionRequest(
        name="" if name is None else str(name),
        width=round(_number(fields, "width")),
        height=round(_number(fields, "height")),
        blur_areas=tuple(areas),
        crop=CropBounds(
            left=round(_number(fields, "crop_left", 0)),
            top=round(_number(fields, "crop_top", 0)),
            right=round(_number(fields, "crop_right", 0)),
            bottom=round(_number(fields, "crop_bottom", 0)),
        ),
        rotate=_number(fields, "rotate", 0),
        region_frame=region_frame,
    )


class CrudDispatcher:
    """Find, list, upsert, delete and insert documents of any collection."""

    def __init__(
        self,
        registry: SchemaRegistry,
        repository: DocumentRepository,
        file_placement: FilePlacementService,
        redaction: ImageRedactionService,
        settings: Settings | None = None,
    ) -> None:
        self.registry = registry
        self.repository = repository
        self.file_placement = file_placement
        self.redaction = redaction
        self.settings = settings or get_settings()

    def _prepare(self, collection: CollectionDefinition, data: Mapping[str, Any]) -> dict[str, Any]:
        processed, issues = DocumentValidator.validate(
            data,
            self.registry.storage_schema(collection.name),
            strict=collection.strict,
        )
        if issues:
            logger.info(
                "Document rejected",
                collection=collection.name,
                fields=[issue.field for issue in issues],
            )
            raise DocumentValidationError(collection.name, issues)
        return processed

    def _build_document(self, collection: CollectionDefinition, payload: WritePayload) -> dict[str, Any]:
        """Coerce, validate, then write uploads. Nothing is written for a rejected payload."""
        fields = coerce_form_data(payload.fields) if payload.is_form else dict(payload.fields)
        planned = self.file_placement.plan_files(collection, payload.files)
        document = self._prepare(collection, {**fields, **metadata_by_field(planned)})
        self.file_placement.write_files(planned)
        return document

    def _present(
        self, collection: CollectionDefinition, document: dict[str, Any], language: str | None
    ) -> dict[str, Any]:
        if not language:
            return document
        return present_document(collection, document, language, self.settings.default_language)

    async def find_by_id(
        self, collection_name: str, document_id: str, language: str | None = None
    ) -> dict[str, Any] | None:
        """One document, or None when the id is unknown.

        With ``language`` the document is localized and passed through the
        fields' display transforms.
        """
        collection = self.registry.get_collection(collection_name)
        document = await self.repository.get_by_id(collection.name, document_id)
        if document is None:
            return None
        return self._present(collection, document, language)

    async def find(self, collection_name: str, raw_query: Any) -> list[dict[str, Any]]:
        """Documents matching a Mongo-style filter.

        Raises:
            CollectionNotFoundError: Unknown collection.
            QueryError: Malformed filter.
        """
        collection = self.registry.get_collection(collection_name)
        query = parse_query(raw_query)
        return await self.repository.find_all(collection.name, query)

    async def list_documents(
        self,
        collection_name: str,
        page: Any = None,
        length: Any = None,
        language: str | None = None,
    ) -> dict[str, Any]:
        collection = self.registry.get_collection(collection_name)
        page_number = parse_page_param(page, 1)
        page_length = parse_page_param(length, None)
        total, entries = await self.repository.find_page(collection.name, page_number, page_length)
        return {
            "totalCount": total,
            "entryList": [self._present(collection, entry, language) for entry in entries],
        }

    async def update(self, collection_name: str, payload: WritePayload) -> dict[str, Any]:
        """Upsert by ``_id``: merge into an existing document or create it."""
        collection = self.registry.get_collection(collection_name)
        fields = dict(payload.fields)
        document_id = fields.pop("_id", None)
        document = self._build_document(
            collection,
            WritePayload(fields=fields, files=payload.files, is_form=payload.is_form),
        )
        return await self.repository.upsert(
            collection.name,
            str(document_id) if document_id not in (None, "") else None,
            document,
        )

    async def delete(self, collection_name: str, ids: Any) -> dict[str, Any]:
        collection = self.registry.get_collection(collection_name)
        deleted = await self.repository.delete_many(collection.name, parse_ids(ids))
        return {"acknowledged": True, "deletedCount": deleted}

    async def insert(self, collection_name: str, payload: WritePayload) -> list[dict[str, Any]]:
        """Insert one document, or one per redacted image on the redaction path."""
        collection = self.registry.get_collection(collection_name)
        if payload.files and REDACTION_TRIGGER in payload.fields:
            return await self._insert_redacted(collection, payload)

        document = self._build_document(collection, payload)
        return await self.repository.insert_many(collection.name, [document])

    async def _insert_redacted(
        self, collection: CollectionDefinition, payload: WritePayload
    ) -> list[dict[str, Any]]:
        fields = coerce_form_data(payload.fields) if payload.is_form else dict(payload.fields)
        # The output name is used verbatim.
        fields["name"] = payload.fields.get("name")
        request = parse_redaction_request(fields)
        self.redaction.validate(request)

        # Documents are validated before any image is written.
        documents = [
            self._prepare(
                collection,
                {
                    self.settings.redaction_name_field: request.name,
                    self.settings.redaction_image_field: {
                        "originalname": filename,
                        "mimetype": OUTPUT_MIME_TYPE,
                    },
                },
            )
            for filename in self.redaction.output_names(request.name, len(payload.files))
        ]
        outputs = await asyncio.to_thread(self.redaction.redact, payload.files, request)
        logger.info("Redaction finished", collection=collection.name, outputs=len(outputs))
        return await self.repository.insert_many(collection.name, documents)
