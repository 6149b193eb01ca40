"""Immutable registry of collection definitions.

The registry is built once at startup and handed to request handlers
through dependency injection. Each entry keeps its compiled storage schema
so handlers never recompile at request time.
"""

import importlib
import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Iterable

from cmsbase.core.logging import get_logger
from cmsbase.domain.entities import CollectionDefinition, FieldDefinition
from cmsbase.domain.exceptions import CollectionNotFoundError, SchemaDefinitionError
from cmsbase.domain.services.schema_compiler import compile_storage_schema

logger = get_logger(__name__)

_NON_IDENTIFIER = re.compile(r"[^a-z0-9]+")


def storage_key(name: str) -> str:
    """Derive the storage identifier of a collection from its name."""
    key = _NON_IDENTIFIER.sub("_", name.lower()).strip("_")
    if not key:
        raise SchemaDefinitionError(f"Collection name '{name}' has no usable characters")
    return key


class SchemaRegistry(Mapping[str, CollectionDefinition]):
    """Read-only, ordered mapping of collection name to definition."""

    def __init__(self, collections: Iterable[CollectionDefinition]) -> None:
        entries: dict[str, CollectionDefinition] = {}
        schemas: dict[str, dict[str, Any]] = {}
        keys: dict[str, str] = {}

        for collection in collections:
            if collection.name in entries:
                raise SchemaDefinitionError(f"Duplicate collection name '{collection.name}'")
            key = storage_key(collection.name)
            if key in keys:
                raise SchemaDefinitionError(
                    f"Collections '{keys[key]}' and '{collection.name}' map to the same storage key '{key}'"
                )
            _check_sibling_titles(collection.fields, collection.name)

            entries[collection.name] = collection
            schemas[collection.name] = compile_storage_schema(collection.fields)
            keys[key] = collection.name

        self._entries = MappingProxyType(entries)
        self._schemas = MappingProxyType(
            {name: MappingProxyType(schema) for name, schema in schemas.items()}
        )

    def __getitem__(self, name: str) -> CollectionDefinition:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_collection(self, name: str) -> CollectionDefinition:
        """Return a collection or fail fast.

        Raises:
            CollectionNotFoundError: If no collection has that name.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise CollectionNotFoundError(name) from None

    def storage_schema(self, name: str) -> Mapping[str, Any]:
        """Return the compiled storage schema of a collection."""
        if name not in self._schemas:
            raise CollectionNotFoundError(name)
        return self._schemas[name]

    def to_list(self) -> list[dict[str, Any]]:
        return [collection.to_dict() for collection in self._entries.values()]


def _check_sibling_titles(fields: tuple[FieldDefinition, ...], owner: str) -> None:
    seen: set[str] = set()
    for field in fields:
        if field.title in seen:
            raise SchemaDefinitionError(f"Duplicate field title '{field.title}' in '{owner}'")
        seen.add(field.title)
        if field.fields:
            _check_sibling_titles(field.fields, f"{owner}.{field.title}")


def build_registry(collections: Iterable[CollectionDefinition]) -> SchemaRegistry:
    """Validate declarations and build the registry."""
    registry = SchemaRegistry(collections)
    logger.info("Schema registry built", collections=list(registry))
    return registry


def load_registry(module_path: str) -> SchemaRegistry:
    """Import ``module_path`` and build a registry from its ``COLLECTIONS``.

    Raises:
        SchemaDefinitionError: If the module does not declare ``COLLECTIONS``.
    """
    module = importlib.import_module(module_path)
    collections = getattr(module, "COLLECTIONS", None)
    if collections is None:
        raise SchemaDefinitionError(f"Module '{module_path}' does not define COLLECTIONS")
    return build_registry(collections)
