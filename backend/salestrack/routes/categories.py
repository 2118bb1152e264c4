"""
SalesTrack Backend — Category Routes
======================================

What:  Active categories for sellers; category management for the owner.
       Deleting a category still referenced by products answers 400 with
       the product names in `details.products`.
"""

from fastapi import APIRouter, Depends

from salestrack.dependencies import DocumentSession, get_document_session
from salestrack.schemas.entities import (
    CategoryCreate,
    CategoryEnvelope,
    CategoryListResponse,
    CategoryUpdate,
    ErrorResponse,
    SuccessResponse,
)
from salestrack.services.category_service import category_service

router = APIRouter(prefix="/api", tags=["Categories"])

WRITE_ERRORS = {
    400: {"description": "Validation failed or category in use", "model": ErrorResponse},
    404: {"description": "Category not found", "model": ErrorResponse},
    500: {"description": "Changes could not be saved", "model": ErrorResponse},
}


@router.get("/categories", response_model=CategoryListResponse, summary="Active categories")
async def list_active_categories(
    session: DocumentSession = Depends(get_document_session),
) -> CategoryListResponse:
    return CategoryListResponse(
        categories=category_service.list_categories(session, active_only=True)
    )


@router.get("/owner/categories", response_model=CategoryListResponse, summary="All categories")
async def list_categories(
    session: DocumentSession = Depends(get_document_session),
) -> CategoryListResponse:
    return CategoryListResponse(categories=category_service.list_categories(session))


@router.post(
    "/owner/categories",
    response_model=CategoryEnvelope,
    responses=WRITE_ERRORS,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    session: DocumentSession = Depends(get_document_session),
) -> CategoryEnvelope:
    category = await category_service.create_category(session, data)
    return CategoryEnvelope(category=category)


@router.put(
    "/owner/categories/{category_id}",
    response_model=CategoryEnvelope,
    responses=WRITE_ERRORS,
    summary="Update a category",
)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    session: DocumentSession = Depends(get_document_session),
) -> CategoryEnvelope:
    category = await category_service.update_category(session, category_id, data)
    return CategoryEnvelope(category=category)


@router.delete(
    "/owner/categories/{category_id}",
    response_model=SuccessResponse,
    responses=WRITE_ERRORS,
    summary="Delete a category not used by any product",
)
async def delete_category(
    category_id: str,
    session: DocumentSession = Depends(get_document_session),
) -> SuccessResponse:
    await category_service.delete_category(session, category_id)
    return SuccessResponse()
