"""
SalesTrack Backend — Owner Seller Routes
==========================================

What:  Seller management for the owner app under /api/owner/sellers.
How:   Thin handlers: parse the body, call SellerService with the request's
       document session, wrap the result in the success envelope.
"""

from fastapi import APIRouter, Depends

from salestrack.dependencies import DocumentSession, get_document_session
from salestrack.schemas.entities import (
    ErrorResponse,
    SellerCreate,
    SellerEnvelope,
    SellerListResponse,
    SellerUpdate,
    SuccessResponse,
)
from salestrack.services.seller_service import seller_service

router = APIRouter(prefix="/api/owner/sellers", tags=["Sellers"])

WRITE_ERRORS = {
    400: {"description": "Validation failed", "model": ErrorResponse},
    404: {"description": "Seller not found", "model": ErrorResponse},
    500: {"description": "Changes could not be saved", "model": ErrorResponse},
}


@router.get("", response_model=SellerListResponse, summary="List sellers (without secrets)")
async def list_sellers(
    session: DocumentSession = Depends(get_document_session),
) -> SellerListResponse:
    return SellerListResponse(sellers=seller_service.list_sellers(session))


@router.post("", response_model=SellerEnvelope, responses=WRITE_ERRORS, summary="Create a seller")
async def create_seller(
    data: SellerCreate,
    session: DocumentSession = Depends(get_document_session),
) -> SellerEnvelope:
    seller = await seller_service.create_seller(session, data)
    return SellerEnvelope(seller=seller)


@router.put(
    "/{seller_id}",
    response_model=SellerEnvelope,
    responses=WRITE_ERRORS,
    summary="Update a seller (partial)",
)
async def update_seller(
    seller_id: str,
    data: SellerUpdate,
    session: DocumentSession = Depends(get_document_session),
) -> SellerEnvelope:
    seller = await seller_service.update_seller(session, seller_id, data)
    return SellerEnvelope(seller=seller)


@router.delete(
    "/{seller_id}",
    response_model=SuccessResponse,
    responses=WRITE_ERRORS,
    summary="Delete a seller",
)
async def delete_seller(
    seller_id: str,
    session: DocumentSession = Depends(get_document_session),
) -> SuccessResponse:
    await seller_service.delete_seller(session, seller_id)
    return SuccessResponse()
