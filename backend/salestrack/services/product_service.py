"""
SalesTrack Backend — Product Service
======================================

What:  Product listing, create, update and delete.
How:   Every create/update recomputes `status` from stock and minStock and
       resolves `categoryId` (unknown ids silently become "no category").
       Reads add `categoryName` without storing it.
Who:   Called by the seller product route and the owner product routes.
"""

import logging
from typing import List, Optional

from salestrack.dependencies import DocumentSession
from salestrack.exceptions import NotFoundError, ValidationError
from salestrack.models.document import (
    NO_CATEGORY_LABEL,
    PRODUCT_ID_PREFIX,
    Document,
    Entity,
    find_by_id,
    generate_id,
    product_status,
)
from salestrack.schemas.entities import ProductCreate, ProductUpdate
from salestrack.services.category_service import resolve_category_id

logger = logging.getLogger(__name__)


def category_name(document: Document, category_id: Optional[str]) -> str:
    category = find_by_id(document["categories"], category_id) if category_id else None
    if category is None:
        return NO_CATEGORY_LABEL
    return category.get("name") or NO_CATEGORY_LABEL


def product_view(document: Document, product: Entity) -> Entity:
    """Stored product plus its resolved category name."""
    view = dict(product)
    view.setdefault("categoryId", None)
    view["categoryName"] = category_name(document, product.get("categoryId"))
    return view


def _non_negative(value, field: str) -> None:
    if value is not None and value < 0:
        raise ValidationError(message=f"{field} cannot be negative", field=field)


class ProductService:

    def list_products(self, session: DocumentSession) -> List[Entity]:
        document = session.document
        return [product_view(document, p) for p in document["products"]]

    async def create_product(self, session: DocumentSession, data: ProductCreate) -> Entity:
        if not data.name or not data.name.strip():
            raise ValidationError(message="Product name is required", field="name")
        _non_negative(data.price, "price")
        _non_negative(data.stock, "stock")
        _non_negative(data.min_stock, "minStock")

        document = session.document
        stock = data.stock or 0
        min_stock = data.min_stock or 0
        product = {
            "id": generate_id(PRODUCT_ID_PREFIX),
            "name": data.name.strip(),
            "categoryId": resolve_category_id(document, data.category_id),
            "price": data.price or 0.0,
            "stock": stock,
            "minStock": min_stock,
            "status": product_status(stock, min_stock),
        }
        document["products"].append(product)
        await session.commit()

        logger.info("Product created: %s (%s)", product["id"], product["name"])
        return product_view(document, product)

    async def update_product(
        self,
        session: DocumentSession,
        product_id: str,
        data: ProductUpdate,
    ) -> Entity:
        document = session.document
        product = find_by_id(document["products"], product_id)
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)

        _non_negative(data.price, "price")
        _non_negative(data.stock, "stock")
        _non_negative(data.min_stock, "minStock")

        fields = data.model_fields_set
        if data.name:
            product["name"] = data.name.strip()
        if data.price is not None:
            product["price"] = data.price
        if data.stock is not None:
            product["stock"] = data.stock
        if data.min_stock is not None:
            product["minStock"] = data.min_stock
        if "category_id" in fields:
            # An explicit null or unknown id clears the category.
            product["categoryId"] = resolve_category_id(document, data.category_id)

        product["status"] = product_status(product.get("stock", 0), product.get("minStock", 0))
        await session.commit()

        logger.info("Product updated: %s (status=%s)", product_id, product["status"])
        return product_view(document, product)

    async def delete_product(self, session: DocumentSession, product_id: str) -> None:
        products = session.document["products"]
        product = find_by_id(products, product_id)
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)

        products.remove(product)
        await session.commit()
        logger.info("Product deleted: %s", product_id)


product_service = ProductService()
