"""
Tier-1 tests for field_classifier.py.

Pure in-memory, no DB.
"""

from page_builder.domain.services.field_classifier import (
    CORE_FIELDS,
    ClassifiedFields,
    flatten,
    split,
    unsplit,
    unsplit_attributes,
)


class TestSplit:

    def test_core_fields_go_to_core(self):
        result = split({"id": 7, "type": "text", "position": 2, "body": "Hi"})
        assert result.core == {"id": 7, "type": "text", "position": 2}
        assert result.content == {"body": "Hi"}

    def test_no_core_fields(self):
        result = split({"src": "x.png", "alt": "X"})
        assert result.core == {}
        assert result.content == {"src": "x.png", "alt": "X"}

    def test_empty_map(self):
        result = split({})
        assert result.core == {}
        assert result.content == {}

    def test_partition_is_exhaustive_and_exclusive(self):
        flat = {"id": 1, "type": "quote", "text": "A", "cite": "B", "position": 3}
        result = split(flat)
        assert set(result.core) | set(result.content) == set(flat)
        assert not set(result.core) & set(result.content)
        assert set(result.core) <= CORE_FIELDS

    def test_custom_allow_list(self):
        result = split({"type": "text", "sort": 4, "body": "x"}, core_fields={"type", "sort"})
        assert result.core == {"type": "text", "sort": 4}
        assert result.content == {"body": "x"}

    def test_as_columns_nests_content(self):
        classified = ClassifiedFields(core={"position": 1}, content={"body": "B"})
        assert classified.as_columns() == {"position": 1, "content": {"body": "B"}}


class TestUnsplit:

    def test_content_promoted_to_data(self):
        item = unsplit({"id": 1, "type": "text", "position": 1}, {"body": "A"})
        assert item == {"id": 1, "type": "text", "position": 1, "data": {"body": "A"}}

    def test_content_never_shadows_core(self):
        item = unsplit({"type": "text"}, {"type": "evil", "body": "A"})
        assert item["type"] == "text"
        assert item["data"] == {"body": "A"}

    def test_unsplit_attributes_moves_content(self):
        item = unsplit_attributes(
            {"id": 3, "type": "image", "position": 2, "content": {"src": "x.png"}}
        )
        assert "content" not in item
        assert item["data"] == {"src": "x.png"}

    def test_unsplit_attributes_tolerates_bad_content(self):
        item = unsplit_attributes({"id": 3, "type": "text", "position": 1, "content": None})
        assert item["data"] == {}


class TestBijection:

    def test_flatten_inverts_unsplit_of_split(self):
        flat = {"id": 5, "type": "text", "position": 2, "body": "A", "tone": "calm"}
        classified = split(flat)
        assert flatten(unsplit(classified.core, classified.content)) == flat

    def test_split_recovers_partition(self):
        core = {"id": 5, "type": "quote", "position": 1}
        content = {"text": "Q", "cite": "C"}
        classified = split(flatten(unsplit(core, content)))
        assert classified.core == core
        assert classified.content == content
