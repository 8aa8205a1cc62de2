"""Cassandra repository for categories."""

from typing import TYPE_CHECKING
from uuid import UUID

from coursehub.categories.models import Category, name_key


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CategoryRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.categories WHERE id = ?"
        )
        self._list_all = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.categories"
        )
        self._get_id_by_name = self.session.prepare(
            f"SELECT category_id FROM {self.keyspace}.categories_by_name "
            "WHERE name_key = ?"
        )
        self._claim_name = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.categories_by_name (name_key, category_id)
            VALUES (?, ?)
            IF NOT EXISTS
        """)
        self._release_name = self.session.prepare(
            f"DELETE FROM {self.keyspace}.categories_by_name WHERE name_key = ?"
        )
        self._upsert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.categories (id, name, created_at)
            VALUES (?, ?, ?)
        """)
        self._delete = self.session.prepare(
            f"DELETE FROM {self.keyspace}.categories WHERE id = ?"
        )

    async def get(self, category_id: UUID) -> Category | None:
        result = await self.session.aexecute(self._get, [category_id])
        row = result.one()
        return Category.from_row(row) if row else None

    async def get_by_name(self, name: str) -> Category | None:
        result = await self.session.aexecute(self._get_id_by_name, [name_key(name)])
        row = result.one()
        if row is None:
            return None
        return await self.get(row.category_id)

    async def list_all(self) -> list[Category]:
        rows = await self.session.aexecute(self._list_all)
        return [Category.from_row(row) for row in rows]

    async def claim_name(self, name: str, category_id: UUID) -> bool:
        """Reserve a name for a category.

        Returns:
            False if another category already holds the name
        """
        result = await self.session.aexecute(
            self._claim_name, [name_key(name), category_id]
        )
        return bool(result.was_applied)

    async def release_name(self, name: str) -> None:
        await self.session.aexecute(self._release_name, [name_key(name)])

    async def save(self, category: Category) -> None:
        await self.session.aexecute(
            self._upsert, [category.id, category.name, category.created_at]
        )

    async def delete(self, category_id: UUID) -> None:
        await self.session.aexecute(self._delete, [category_id])
