"""
SalesTrack Backend — Seller Login Route
=========================================

What:  POST /api/login for the seller mobile app.
How:   Exact login + secret match against active sellers (plain-text
       comparison; there is no real authentication layer).

Responses:
    200  {"success": true, "seller": {...profile, no secret...}}
    400  login or secret missing
    401  no active seller matches
"""

import logging

from fastapi import APIRouter, Depends

from salestrack.dependencies import DocumentSession, get_document_session
from salestrack.schemas.entities import ErrorResponse, LoginRequest, LoginResponse
from salestrack.services.seller_service import seller_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing credentials", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Seller login",
)
async def login(
    credentials: LoginRequest,
    session: DocumentSession = Depends(get_document_session),
) -> LoginResponse:
    profile = seller_service.authenticate(session, credentials)
    return LoginResponse(seller=profile)
