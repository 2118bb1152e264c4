"""
SalesTrack Backend — Category Service
=======================================

What:  Category listing, create, update and guarded delete.
Who:   Called by the category routes; ProductService uses the lookups here
       to resolve product category references.

Referential integrity lives here, not in the store: a category that any
product still references cannot be deleted.
"""

import logging
from typing import List, Optional

from salestrack.dependencies import DocumentSession
from salestrack.exceptions import NotFoundError, ValidationError
from salestrack.models.document import (
    CATEGORY_ID_PREFIX,
    Document,
    Entity,
    find_by_id,
    generate_id,
)
from salestrack.schemas.entities import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


def resolve_category_id(document: Document, category_id: Optional[str]) -> Optional[str]:
    """The id itself when it names an existing category, otherwise None."""
    if not category_id:
        return None
    if find_by_id(document["categories"], category_id) is None:
        logger.info("Dropping unknown category reference %s", category_id)
        return None
    return category_id


class CategoryService:

    def list_categories(
        self,
        session: DocumentSession,
        active_only: bool = False,
    ) -> List[Entity]:
        categories = session.document["categories"]
        if active_only:
            return [c for c in categories if c.get("active", True)]
        return list(categories)

    async def create_category(self, session: DocumentSession, data: CategoryCreate) -> Entity:
        if not data.name or not data.name.strip():
            raise ValidationError(message="Category name is required", field="name")

        category = {
            "id": generate_id(CATEGORY_ID_PREFIX),
            "name": data.name.strip(),
            "description": data.description or "",
            "active": True,
        }
        session.document["categories"].append(category)
        await session.commit()

        logger.info("Category created: %s (%s)", category["id"], category["name"])
        return category

    async def update_category(
        self,
        session: DocumentSession,
        category_id: str,
        data: CategoryUpdate,
    ) -> Entity:
        category = find_by_id(session.document["categories"], category_id)
        if category is None:
            raise NotFoundError(resource="category", resource_id=category_id)

        if data.name is not None:
            if not data.name.strip():
                raise ValidationError(message="Category name cannot be empty", field="name")
            category["name"] = data.name.strip()
        if data.description is not None:
            category["description"] = data.description
        if data.active is not None:
            category["active"] = data.active
        await session.commit()

        logger.info("Category updated: %s", category_id)
        return category

    async def delete_category(self, session: DocumentSession, category_id: str) -> None:
        """
        Raises:
            NotFoundError: unknown category
            ValidationError: products still reference it; details carry
                their names under "products"
        """
        categories = session.document["categories"]
        category = find_by_id(categories, category_id)
        if category is None:
            raise NotFoundError(resource="category", resource_id=category_id)

        in_use = [
            p.get("name", p.get("id"))
            for p in session.document["products"]
            if p.get("categoryId") == category_id
        ]
        if in_use:
            raise ValidationError(
                message=(
                    f"Category '{category['name']}' is used by {len(in_use)} product(s) "
                    f"and cannot be deleted"
                ),
                context={"products": in_use},
            )

        categories.remove(category)
        await session.commit()
        logger.info("Category deleted: %s", category_id)


category_service = CategoryService()
