"""
Tier-1 tests for block_binder.py.

Pure in-memory, no DB.
"""

from page_builder.domain.services.block_binder import (
    BoundItem,
    bind,
    normalize_state,
    unresolved_keys,
)
from page_builder.persistence.models import StoredBlock


def record(block_id, type="text", **content):
    return StoredBlock(block_id=block_id, page_id=1, type=type, position=block_id, content=content)


class TestNormalizeState:

    def test_none_becomes_empty(self):
        assert normalize_state(None) == {}

    def test_scalar_becomes_empty(self):
        assert normalize_state("garbage") == {}
        assert normalize_state(42) == {}

    def test_mapping_keeps_order_and_drops_non_mappings(self):
        state = normalize_state({"b": {"type": "text"}, "x": "junk", "a": {"type": "image"}})
        assert list(state) == ["b", "a"]

    def test_list_items_with_id_reference_record(self):
        state = normalize_state([{"id": 4, "type": "text", "data": {}}])
        assert list(state) == ["record-4"]

    def test_list_items_with_explicit_key(self):
        state = normalize_state([{"key": "record-9", "type": "text"}])
        assert list(state) == ["record-9"]
        assert "key" not in state["record-9"]

    def test_list_items_without_reference_get_fresh_keys(self):
        state = normalize_state([{"type": "text"}, {"type": "text"}])
        keys = list(state)
        assert len(keys) == 2
        assert not any(key.startswith("record-") for key in keys)

    def test_repeated_id_becomes_a_new_item(self):
        state = normalize_state([
            {"id": 4, "type": "text", "data": {"body": "A"}},
            {"id": 4, "type": "text", "data": {"body": "copy"}},
        ])

        first, second = list(state)
        assert first == "record-4"
        assert not second.startswith("record-")
        assert "id" not in state[second]
        assert state[second]["data"] == {"body": "copy"}

    def test_repeated_key_becomes_a_new_item(self):
        state = normalize_state([{"key": "record-9", "type": "text"}, {"key": "record-9", "type": "quote"}])
        assert len(state) == 2
        assert state["record-9"]["type"] == "text"

    def test_normalizing_copies_items(self):
        item = {"type": "text", "data": {}}
        state = normalize_state({"k": item})
        state["k"]["type"] = "quote"
        assert item["type"] == "text"


class TestBind:

    def test_binds_descriptor_and_record_by_key(self, registry):
        records = {"record-1": record(1)}
        state = {"record-1": {"type": "text", "data": {"body": "B"}}}

        bound = bind(state, records, registry)

        assert len(bound) == 1
        assert bound[0].descriptor.system_name == "text"
        assert bound[0].record is records["record-1"]
        assert not bound[0].is_new

    def test_reordered_items_keep_their_records(self, registry):
        records = {"record-1": record(1), "record-2": record(2, type="image")}
        state = {
            "record-2": {"type": "image", "data": {"src": "b.png"}},
            "record-1": {"type": "text", "data": {"body": "A"}},
        }

        bound = bind(state, records, registry)

        assert [item.record.block_id for item in bound] == [2, 1]

    def test_new_items_have_no_record(self, registry):
        bound = bind({"f00": {"type": "quote", "data": {"text": "Q"}}}, {}, registry)
        assert bound[0].is_new
        assert bound[0].record is None

    def test_unknown_types_are_excluded(self, registry):
        state = {
            "a": {"type": "text", "data": {}},
            "b": {"type": "unknown-block", "data": {}},
            "c": {"type": "image", "data": {"src": "x"}},
        }

        bound = bind(state, {}, registry)

        assert [item.key for item in bound] == ["a", "c"]
        assert "b" in state
        assert unresolved_keys(state, registry) == ["b"]

    def test_index_is_submitted_position(self, registry):
        state = {"a": {"type": "nope"}, "b": {"type": "text"}}
        assert bind(state, {}, registry)[0].index == 1

    def test_state_path_scopes_each_item(self, registry):
        bound = bind({"record-3": {"type": "text", "data": {}}}, {}, registry)
        assert bound[0].state_path == "record-3.data"


class TestBoundItemState:

    def test_get_state_returns_copy(self, registry):
        item = {"type": "text", "data": {"body": "A"}}
        bound = BoundItem(key="k", index=0, item=item, descriptor=registry.get("text"))

        state = bound.get_state()
        state["body"] = "changed"

        assert item["data"]["body"] == "A"

    def test_set_state_writes_only_own_item(self, registry):
        state = {"a": {"type": "text", "data": {"body": "A"}}, "b": {"type": "text", "data": {"body": "B"}}}
        first, second = bind(state, {}, registry)

        first.set_state({"body": "A2"})

        assert state["a"]["data"] == {"body": "A2"}
        assert state["b"]["data"] == {"body": "B"}

    def test_missing_data_is_empty(self, registry):
        bound = BoundItem(key="k", index=0, item={"type": "text"}, descriptor=registry.get("text"))
        assert bound.get_state() == {}
