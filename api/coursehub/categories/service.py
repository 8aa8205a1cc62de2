"""Category management service."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.categories.models import Category, name_key
from coursehub.core.errors import ConflictError, NotFoundError


if TYPE_CHECKING:
    from coursehub.categories.repository import CategoryRepository

logger = structlog.get_logger(__name__)


class CategoryNotFoundError(NotFoundError):
    def __init__(self, message: str = "Category not found"):
        super().__init__(message, "category_not_found")


class CategoryExistsError(ConflictError):
    def __init__(self, message: str = "Category already exists"):
        super().__init__(message, "category_exists")


class CategoryService:
    """Create, rename, delete and list categories."""

    def __init__(self, categories: "CategoryRepository"):
        self.categories = categories

    async def list_categories(self) -> list[Category]:
        categories = await self.categories.list_all()
        return sorted(categories, key=lambda c: c.key)

    async def get_category(self, category_id: UUID) -> Category:
        category = await self.categories.get(category_id)
        if category is None:
            raise CategoryNotFoundError
        return category

    async def find_by_name(self, name: str) -> Category | None:
        return await self.categories.get_by_name(name)

    async def create_category(self, name: str) -> Category:
        """Create a category.

        Raises:
            CategoryExistsError: If the name is taken (case-insensitive)
        """
        category = Category(name=name)
        if not await self.categories.claim_name(category.name, category.id):
            raise CategoryExistsError
        await self.categories.save(category)

        logger.info("category_created", category_id=str(category.id), name=category.name)
        return category

    async def rename_category(self, category_id: UUID, name: str) -> Category:
        """Rename a category, keeping the name lookup consistent.

        Raises:
            CategoryNotFoundError: If the category does not exist
            CategoryExistsError: If another category holds the new name
        """
        category = await self.get_category(category_id)
        old_name = category.name
        new_name = name.strip()

        if name_key(new_name) != name_key(old_name):
            if not await self.categories.claim_name(new_name, category.id):
                raise CategoryExistsError
            await self.categories.release_name(old_name)

        category.name = new_name
        await self.categories.save(category)

        logger.info(
            "category_renamed",
            category_id=str(category.id),
            old_name=old_name,
            name=new_name,
        )
        return category

    async def delete_category(self, category_id: UUID) -> None:
        """Delete a category. Courses keep their dangling category id."""
        category = await self.get_category(category_id)
        await self.categories.delete(category.id)
        await self.categories.release_name(category.name)
        logger.info("category_deleted", category_id=str(category.id))
