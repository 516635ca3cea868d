"""Tests for the PostgreSQL block repository (run on aiosqlite)."""

import pytest

from page_builder.api.models import Block, Page
from page_builder.domain.registry import default_registry
from page_builder.domain.services.block_editor import BlockEditor
from page_builder.persistence.models import StoredBlock, TranslatableBlock
from page_builder.persistence.pg_repositories import (
    _orm_to_stored_block,
    _stored_to_orm_block,
    PostgresBlockRepository,
    create_repository,
)
from page_builder.persistence.repositories import BlockNotFoundError, InMemoryBlockRepository


class TestBlockConversion:
    """Tests for ORM <-> domain model conversion."""

    def test_orm_to_stored_block(self):
        orm_block = Block(id=3, page_id=1, type="text", position=2, content={"body": "A"})

        stored = _orm_to_stored_block(orm_block)

        assert type(stored) is StoredBlock
        assert stored.block_id == 3
        assert stored.page_id == 1
        assert stored.type == "text"
        assert stored.position == 2
        assert stored.content == {"body": "A"}

    def test_orm_to_stored_copies_content(self):
        orm_block = Block(id=3, page_id=1, type="text", content={"body": "A"})

        stored = _orm_to_stored_block(orm_block)
        stored.content["body"] = "B"

        assert orm_block.content == {"body": "A"}

    def test_orm_to_translatable_block(self):
        orm_block = Block(
            id=3, page_id=1, type="text", position=1,
            content={"body": "Hello"},
            translations={"content": {"fr": {"body": "Bonjour"}}},
        )

        stored = _orm_to_stored_block(orm_block, translatable=True)

        assert isinstance(stored, TranslatableBlock)
        assert stored.get_translation("content", "fr") == {"body": "Bonjour"}

    def test_missing_content_becomes_empty(self):
        stored = _orm_to_stored_block(Block(id=1, page_id=1, type="text", content=None))
        assert stored.content == {}

    def test_stored_to_orm_block(self):
        stored = StoredBlock(block_id=None, page_id=4, type="quote", position=1, content={"text": "Q"})

        orm_block = _stored_to_orm_block(stored)

        assert orm_block.id is None
        assert orm_block.page_id == 4
        assert orm_block.type == "quote"
        assert orm_block.content == {"text": "Q"}

    def test_stored_to_existing_orm_block(self):
        orm_block = Block(id=9, page_id=4, type="text", position=1, content={"body": "old"})
        stored = StoredBlock(block_id=9, page_id=4, type="text", position=2, content={"body": "new"})

        result = _stored_to_orm_block(stored, orm_block)

        assert result is orm_block
        assert orm_block.position == 2
        assert orm_block.content == {"body": "new"}

    def test_empty_translations_stored_as_null(self):
        stored = TranslatableBlock(block_id=None, page_id=1, type="text")
        assert _stored_to_orm_block(stored).translations is None


class TestCreateRepository:

    def test_postgres_by_default(self, db_session):
        assert isinstance(create_repository(db_session), PostgresBlockRepository)

    def test_in_memory(self):
        repository = create_repository(None, use_postgres=False, translatable=True)
        assert isinstance(repository, InMemoryBlockRepository)
        assert isinstance(repository.make_record(1), TranslatableBlock)


class TestPostgresBlockRepository:

    async def _insert(self, repository, page_id, type, position=None, **content):
        record = repository.make_record(page_id)
        record.fill({"type": type, "position": position, "content": content})
        return await repository.insert(record)

    async def test_insert_assigns_id(self, db_session, page):
        repository = PostgresBlockRepository(db_session)

        record = await self._insert(repository, page.id, "text", 1, body="A")

        assert record.block_id is not None
        row = await db_session.get(Block, record.block_id)
        assert row.content == {"body": "A"}

    async def test_fetch_ordered_by_position(self, db_session, page):
        repository = PostgresBlockRepository(db_session)
        late = await self._insert(repository, page.id, "text", 2)
        early = await self._insert(repository, page.id, "image", 1, src="a.png")

        rows = await repository.fetch_ordered(page.id, "position")

        assert [r.block_id for r in rows] == [early.block_id, late.block_id]

    async def test_fetch_with_modify_query(self, db_session, page):
        repository = PostgresBlockRepository(db_session)
        await self._insert(repository, page.id, "text", 1)
        await self._insert(repository, page.id, "image", 2, src="a.png")

        rows = await repository.fetch_ordered(
            page.id, "position", lambda query: query.where(Block.type == "image")
        )

        assert [r.type for r in rows] == ["image"]

    async def test_delete_is_scoped_to_page(self, db_session, page):
        other = Page(title="Other")
        db_session.add(other)
        await db_session.flush()
        repository = PostgresBlockRepository(db_session)
        mine = await self._insert(repository, page.id, "text", 1)
        theirs = await self._insert(repository, other.id, "text", 1)

        deleted = await repository.delete_where_key_in(page.id, [mine.block_id, theirs.block_id])

        assert deleted == 1
        assert await repository.fetch_ordered(page.id) == []
        assert len(await repository.fetch_ordered(other.id)) == 1

    async def test_delete_nothing(self, db_session, page):
        assert await PostgresBlockRepository(db_session).delete_where_key_in(page.id, []) == 0

    async def test_update_in_place(self, db_session, page):
        repository = PostgresBlockRepository(db_session)
        record = await self._insert(repository, page.id, "text", 1, body="A")

        record.fill({"position": 3, "content": {"body": "B"}})
        await repository.update(record)
        await repository.commit()

        rows = await repository.fetch_ordered(page.id)
        assert rows[0].position == 3
        assert rows[0].content == {"body": "B"}

    async def test_update_missing_raises(self, db_session, page):
        repository = PostgresBlockRepository(db_session)
        with pytest.raises(BlockNotFoundError):
            await repository.update(StoredBlock(block_id=404, page_id=page.id, type="text"))

    async def test_rollback_discards_insert(self, db_session, page):
        repository = PostgresBlockRepository(db_session)
        page_id = page.id
        await self._insert(repository, page_id, "text", 1)

        await repository.rollback()

        assert await repository.fetch_ordered(page_id) == []

    async def test_translations_round_trip(self, db_session, page):
        repository = PostgresBlockRepository(db_session, translatable=True)
        record = repository.make_record(page.id)
        record.fill({"type": "text", "position": 1, "content": {"body": "Hello"}})
        record.set_locale("fr")
        record.fill({"content": {"body": "Bonjour"}})
        await repository.insert(record)
        await repository.commit()

        stored = (await repository.fetch_ordered(page.id))[0]

        assert stored.content == {"body": "Hello"}
        assert stored.get_translation("content", "fr") == {"body": "Bonjour"}


class TestEditorAgainstDatabase:

    async def test_save_cycle(self, db_session, page):
        editor = BlockEditor(PostgresBlockRepository(db_session), default_registry()).model(page.id)
        editor.add_block("text", {"body": "A"})
        editor.add_block("image", {"src": "b.png", "alt": ""})

        created = await editor.save_relationships()

        assert len(created.created) == 2
        keys = list(editor.get_state())
        text_key, image_key = keys

        editor.delete_block(text_key)
        editor.get_state()[image_key]["data"]["caption"] = "Cap"
        result = await editor.save_relationships()

        assert result.summary == {"deleted": 1, "updated": 1, "created": 0, "skipped": 0}
        rows = await PostgresBlockRepository(db_session).fetch_ordered(page.id, "position")
        assert [(r.type, r.position, r.content) for r in rows] == [
            ("image", 1, {"src": "b.png", "caption": "Cap"}),
        ]
