"""
SalesTrack Backend — Document Model
=====================================

What:  The shape of the single persisted JSON document and its seed content.
How:   Plain dicts and lists, exactly as they are serialized; helpers build
       the empty shell, the default seed and entity identifiers.
Who:   Used by the synchronizer (seeding, normalization), the merge engine
       and the entity services.

Document layout:
    {
        "categories": [{id, name, description, active}],
        "sellers":    [{id, name, login, secret, status, store}],
        "products":   [{id, name, categoryId, price, stock, minStock, status}],
        "sales":      []
    }
"""

import time
from typing import Any, Dict, List, Optional

Document = Dict[str, Any]
Entity = Dict[str, Any]

# Order matters: merged and normalized documents list collections this way.
COLLECTIONS = ("categories", "sellers", "products", "sales")

# ── Entity constants ──────────────────────────────────────────────────────
CATEGORY_ID_PREFIX = "cat"
SELLER_ID_PREFIX = "v"
PRODUCT_ID_PREFIX = "p"

SELLER_ACTIVE = "active"
SELLER_INACTIVE = "inactive"
SELLER_STATUSES = (SELLER_ACTIVE, SELLER_INACTIVE)

PRODUCT_ACTIVE = "active"
PRODUCT_LOW_STOCK = "low-stock"

NO_CATEGORY_LABEL = "No category"
NO_STORE_LABEL = "No store"


def empty_document() -> Document:
    """Document shell with all four collections empty."""
    return {name: [] for name in COLLECTIONS}


def normalize_document(content: Optional[Document]) -> Document:
    """
    Ensure every collection exists and is a list.

    Documents written before categories existed lack that collection;
    unknown top-level keys are kept untouched.
    """
    document: Document = dict(content or {})
    for name in COLLECTIONS:
        if not isinstance(document.get(name), list):
            document[name] = []
    return document


def generate_id(prefix: str) -> str:
    """`{prefix}_{milliseconds}`; same-millisecond collisions are not guarded."""
    return f"{prefix}_{int(time.time() * 1000)}"


def product_status(stock: int, min_stock: int) -> str:
    """Low stock when stock is at or below the minimum."""
    return PRODUCT_LOW_STOCK if stock <= min_stock else PRODUCT_ACTIVE


def find_by_id(collection: List[Entity], entity_id: str) -> Optional[Entity]:
    for entity in collection:
        if entity.get("id") == entity_id:
            return entity
    return None


def default_document() -> Document:
    """
    Seed content written when the store has no document yet.

    Two active sellers (secret "123456"), a few categories and a single
    test product.
    """
    return {
        "categories": [
            {
                "id": "cat_1",
                "name": "General",
                "description": "Products without a specific category",
                "active": True,
            },
            {
                "id": "cat_2",
                "name": "Accesorios",
                "description": "Bolsos, cinturones y bisutería",
                "active": True,
            },
            {
                "id": "cat_3",
                "name": "Calzado",
                "description": "Zapatos y sandalias",
                "active": True,
            },
        ],
        "sellers": [
            {
                "id": "v_1",
                "name": "María González",
                "login": "maria_g",
                "secret": "123456",
                "status": SELLER_ACTIVE,
                "store": "Tienda Centro",
            },
            {
                "id": "v_2",
                "name": "Ana Rodríguez",
                "login": "ana_r",
                "secret": "123456",
                "status": SELLER_ACTIVE,
                "store": "Tienda Norte",
            },
        ],
        "products": [
            {
                "id": "p_1",
                "name": "PRODUCTO DE PRUEBA",
                "categoryId": "cat_1",
                "price": 99.99,
                "stock": 100,
                "minStock": 10,
                "status": PRODUCT_ACTIVE,
            },
        ],
        "sales": [],
    }
