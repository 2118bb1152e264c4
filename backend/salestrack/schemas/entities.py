"""
SalesTrack Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract with the mobile and owner apps.
How:   FastAPI parses request bodies into these models and serializes
       responses through them (generating the OpenAPI docs on the way).

Request bodies declare every field optional: required-field and range rules
are business rules enforced by the services, which answer 400 with the
standard error envelope. Bodies that fail parsing (malformed JSON, wrong
field types) are turned into the same 400 envelope by main.py.

JSON field names are camelCase (`categoryId`, `minStock`) to match the
stored document; Python attributes are snake_case via aliases.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accepts both the alias (camelCase) and the attribute name."""

    model_config = ConfigDict(populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════

class LoginRequest(CamelModel):
    login: Optional[str] = Field(default=None, description="Seller login name")
    secret: Optional[str] = Field(default=None, description="Seller secret (plain text)")


class SellerCreate(CamelModel):
    name: Optional[str] = None
    login: Optional[str] = None
    secret: Optional[str] = None
    store: Optional[str] = Field(default=None, description="Store the seller works at")


class SellerUpdate(CamelModel):
    """Partial update: omitted or empty fields keep their current value."""

    name: Optional[str] = None
    login: Optional[str] = None
    secret: Optional[str] = None
    status: Optional[str] = Field(default=None, description="active or inactive")
    store: Optional[str] = None


class ProductCreate(CamelModel):
    name: Optional[str] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    price: Optional[float] = None
    stock: Optional[int] = None
    min_stock: Optional[int] = Field(default=None, alias="minStock")


class ProductUpdate(CamelModel):
    """Partial update; status is always recomputed from stock and minStock."""

    name: Optional[str] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    price: Optional[float] = None
    stock: Optional[int] = None
    min_stock: Optional[int] = Field(default=None, alias="minStock")


class CategoryCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════

class SellerProfile(CamelModel):
    """A seller as exposed over the API: never includes the secret."""

    id: str
    name: str
    login: str
    status: str
    store: str


class ProductResponse(CamelModel):
    id: str
    name: str
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    category_name: str = Field(alias="categoryName", description="Resolved at read time")
    price: float
    stock: int
    min_stock: int = Field(alias="minStock")
    status: str = Field(description="active or low-stock")


class CategoryResponse(CamelModel):
    id: str
    name: str
    description: str = ""
    active: bool = True


class LoginResponse(BaseModel):
    success: bool = True
    seller: SellerProfile


class SellerEnvelope(BaseModel):
    success: bool = True
    seller: SellerProfile


class ProductEnvelope(BaseModel):
    success: bool = True
    product: ProductResponse


class CategoryEnvelope(BaseModel):
    success: bool = True
    category: CategoryResponse


class SuccessResponse(BaseModel):
    success: bool = True


class SellerListResponse(BaseModel):
    success: bool = True
    sellers: List[SellerProfile]


class ProductListResponse(BaseModel):
    success: bool = True
    products: List[ProductResponse]


class CategoryListResponse(BaseModel):
    success: bool = True
    categories: List[CategoryResponse]


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the exception handlers."""

    success: bool = False
    error: str = Field(description="Human-readable error message")
    details: dict = Field(default_factory=dict)
    request_id: str = ""


class HealthResponse(BaseModel):
    status: str = Field(description="healthy, degraded or unhealthy")
    version: str
    store: str = Field(description="reachable or unreachable")
    sync: dict = Field(description="Synchronizer cache and version state")
    uptime_seconds: float
