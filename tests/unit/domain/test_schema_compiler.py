"""Unit tests for storage schema compilation."""

from cmsbase.collections import COLLECTIONS, widgets
from cmsbase.domain.entities import FieldDefinition
from cmsbase.domain.services import RESERVED_WIDGET_KEY, compile_storage_schema


class TestCompileStorageSchema:
    def test_merges_fragments_in_order(self):
        fields = [widgets.text("Title"), widgets.number("Views"), widgets.checkbox("Draft")]

        assert compile_storage_schema(fields) == {
            "Title": "string",
            "Views": "number",
            "Draft": "boolean",
        }

    def test_later_field_wins_on_collision(self):
        fields = [
            FieldDefinition(title="a", schema={"shared": "string"}),
            FieldDefinition(title="b", schema={"shared": "number"}),
        ]

        assert compile_storage_schema(fields) == {"shared": "number"}

    def test_reserved_widget_key_is_removed(self):
        fields = [FieldDefinition(title="a", schema={"a": "string", RESERVED_WIDGET_KEY: "Text"})]

        assert compile_storage_schema(fields) == {"a": "string"}

    def test_group_contributes_nothing(self):
        group = widgets.group("Author", fields=[widgets.text("Author Name")])

        assert compile_storage_schema([group]) == {}

    def test_malformed_fragment_is_merged_as_is(self):
        fields = [FieldDefinition(title="odd", schema={"odd": 42})]

        assert compile_storage_schema(fields) == {"odd": 42}

    def test_idempotent_and_key_union_for_shipped_collections(self):
        for collection in COLLECTIONS:
            first = compile_storage_schema(collection.fields)
            second = compile_storage_schema(collection.fields)
            assert first == second

            expected_keys = set()
            for field in collection.fields:
                expected_keys |= set(field.schema)
            expected_keys.discard(RESERVED_WIDGET_KEY)
            assert set(first) == expected_keys

    def test_does_not_mutate_field_fragments(self):
        field = FieldDefinition(title="a", schema={"a": "string", RESERVED_WIDGET_KEY: "Text"})

        compile_storage_schema([field])

        assert field.schema == {"a": "string", RESERVED_WIDGET_KEY: "Text"}
