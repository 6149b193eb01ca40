"""Domain entities for cmsbase."""

from cmsbase.domain.entities.collection import (
    CollectionDefinition,
    DisplayTransform,
    FieldDefinition,
    identity_display,
)
from cmsbase.domain.entities.redaction import (
    BlurArea,
    CropBounds,
    RedactionRequest,
    RegionFrame,
)
from cmsbase.domain.entities.upload import UploadedFile, UploadMetadata

__all__ = [
    "BlurArea",
    "CollectionDefinition",
    "CropBounds",
    "DisplayTransform",
    "FieldDefinition",
    "RedactionRequest",
    "RegionFrame",
    "UploadMetadata",
    "UploadedFile",
    "identity_display",
]
