"""
Tier-1 tests for state_hydrator.py.

Pure in-memory, no DB.
"""

from page_builder.domain.services.block_hooks import BlockHooks
from page_builder.domain.services.state_hydrator import hydrate, localized_attributes
from page_builder.persistence.models import StoredBlock, TranslatableBlock


def block(block_id, type="text", position=None, **content):
    return StoredBlock(block_id=block_id, page_id=1, type=type, position=position, content=content)


def snapshot(*records):
    return {record.key: record for record in records}


class TestHydrate:

    def test_empty_snapshot_hydrates_to_empty_state(self):
        assert hydrate({}) == {}

    def test_items_keyed_by_record_key_in_snapshot_order(self):
        records = snapshot(block(2, position=1, body="B"), block(1, position=2, body="A"))
        state = hydrate(records)
        assert list(state) == ["record-2", "record-1"]

    def test_item_shape(self):
        state = hydrate(snapshot(block(1, type="image", position=1, src="x.png")))
        assert state["record-1"] == {
            "id": 1,
            "type": "image",
            "position": 1,
            "data": {"src": "x.png"},
        }

    def test_records_are_not_mutated(self):
        record = block(1, position=1, body="A")
        hydrate(snapshot(record), hooks=BlockHooks(before_fill=lambda data: {**data, "content": {}}))
        assert record.content == {"body": "A"}


class TestBeforeFillHook:

    def test_hook_sees_raw_attributes(self):
        seen = []

        def before_fill(data):
            seen.append(dict(data))
            return data

        hydrate(snapshot(block(1, position=1, body="A")), hooks=BlockHooks(before_fill=before_fill))
        assert seen == [{"id": 1, "type": "text", "position": 1, "content": {"body": "A"}}]

    def test_hook_changes_flow_into_data(self):
        def before_fill(data):
            data["content"] = {**data["content"], "body": data["content"]["body"].upper()}
            return data

        state = hydrate(snapshot(block(1, body="abc")), hooks=BlockHooks(before_fill=before_fill))
        assert state["record-1"]["data"] == {"body": "ABC"}

    def test_hook_returning_none_is_ignored(self):
        state = hydrate(snapshot(block(1, body="A")), hooks=BlockHooks(before_fill=lambda data: None))
        assert state["record-1"]["data"] == {"body": "A"}


class TestLocaleProjection:

    def translated(self):
        return TranslatableBlock(
            block_id=1,
            page_id=1,
            type="text",
            position=1,
            content={"body": "Hello"},
            translations={"content": {"fr": {"body": "Bonjour"}}},
        )

    def test_active_locale_uses_translation(self):
        state = hydrate(snapshot(self.translated()), locale="fr")
        assert state["record-1"]["data"] == {"body": "Bonjour"}

    def test_missing_translation_falls_back_to_base(self):
        state = hydrate(snapshot(self.translated()), locale="de")
        assert state["record-1"]["data"] == {"body": "Hello"}

    def test_no_locale_uses_base(self):
        state = hydrate(snapshot(self.translated()))
        assert state["record-1"]["data"] == {"body": "Hello"}

    def test_plain_records_ignore_locale(self):
        state = hydrate(snapshot(block(1, body="Hello")), locale="fr")
        assert state["record-1"]["data"] == {"body": "Hello"}

    def test_failing_lookup_degrades_to_base(self):
        class BrokenTranslations(TranslatableBlock):
            def get_translation(self, attribute, locale):
                raise KeyError(locale)

        record = BrokenTranslations(block_id=1, page_id=1, type="text", content={"body": "Hello"})
        assert localized_attributes(record, "fr")["content"] == {"body": "Hello"}
