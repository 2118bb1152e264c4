"""
SalesTrack Backend — Product Routes
=====================================

What:  Product catalogue for sellers (read-only) and owners (full CRUD).

Route Inventory:
    GET    /api/products                  seller view
    GET    /api/owner/products            owner view
    POST   /api/owner/products            create
    PUT    /api/owner/products/{id}       partial update
    DELETE /api/owner/products/{id}       delete

Every product in a response carries `categoryName`, resolved at read time.
"""

from fastapi import APIRouter, Depends

from salestrack.dependencies import DocumentSession, get_document_session
from salestrack.schemas.entities import (
    ErrorResponse,
    ProductCreate,
    ProductEnvelope,
    ProductListResponse,
    ProductUpdate,
    SuccessResponse,
)
from salestrack.services.product_service import product_service

router = APIRouter(prefix="/api", tags=["Products"])

WRITE_ERRORS = {
    400: {"description": "Validation failed", "model": ErrorResponse},
    404: {"description": "Product not found", "model": ErrorResponse},
    500: {"description": "Changes could not be saved", "model": ErrorResponse},
}


@router.get("/products", response_model=ProductListResponse, summary="Products for sellers")
async def list_products_for_sellers(
    session: DocumentSession = Depends(get_document_session),
) -> ProductListResponse:
    return ProductListResponse(products=product_service.list_products(session))


@router.get("/owner/products", response_model=ProductListResponse, summary="Products for the owner")
async def list_products(
    session: DocumentSession = Depends(get_document_session),
) -> ProductListResponse:
    return ProductListResponse(products=product_service.list_products(session))


@router.post(
    "/owner/products",
    response_model=ProductEnvelope,
    responses=WRITE_ERRORS,
    summary="Create a product",
)
async def create_product(
    data: ProductCreate,
    session: DocumentSession = Depends(get_document_session),
) -> ProductEnvelope:
    product = await product_service.create_product(session, data)
    return ProductEnvelope(product=product)


@router.put(
    "/owner/products/{product_id}",
    response_model=ProductEnvelope,
    responses=WRITE_ERRORS,
    summary="Update a product (partial)",
)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    session: DocumentSession = Depends(get_document_session),
) -> ProductEnvelope:
    product = await product_service.update_product(session, product_id, data)
    return ProductEnvelope(product=product)


@router.delete(
    "/owner/products/{product_id}",
    response_model=SuccessResponse,
    responses=WRITE_ERRORS,
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    session: DocumentSession = Depends(get_document_session),
) -> SuccessResponse:
    await product_service.delete_product(session, product_id)
    return SuccessResponse()
