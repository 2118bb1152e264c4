"""
SalesTrack Backend — Seller Service
=====================================

What:  Business rules for sellers: login, listing, create, update, delete.
How:   Operates on the request's DocumentSession working copy and commits
       through it; never touches the store directly.
Who:   Called by the login route and the owner seller routes.

Rules:
    - Login matches login + secret exactly, and only for active sellers
    - `login` is unique across sellers
    - Secrets are opaque strings compared as-is (no hashing) and never
      leave the service in a response
"""

import logging
from typing import List

from salestrack.dependencies import DocumentSession
from salestrack.exceptions import AuthenticationError, NotFoundError, ValidationError
from salestrack.models.document import (
    NO_STORE_LABEL,
    SELLER_ACTIVE,
    SELLER_ID_PREFIX,
    SELLER_STATUSES,
    Entity,
    find_by_id,
    generate_id,
)
from salestrack.schemas.entities import LoginRequest, SellerCreate, SellerUpdate

logger = logging.getLogger(__name__)


def seller_profile(seller: Entity) -> Entity:
    """Public view of a seller (everything but the secret)."""
    return {
        "id": seller["id"],
        "name": seller.get("name", ""),
        "login": seller.get("login", ""),
        "status": seller.get("status", SELLER_ACTIVE),
        "store": seller.get("store") or NO_STORE_LABEL,
    }


class SellerService:
    """Seller operations over a document session."""

    def authenticate(self, session: DocumentSession, credentials: LoginRequest) -> Entity:
        """
        Match credentials against active sellers.

        Raises:
            ValidationError: login or secret missing (400)
            AuthenticationError: no active seller with that login and secret (401)
        """
        if not credentials.login or not credentials.secret:
            raise ValidationError(message="Login and secret are required")

        for seller in session.document["sellers"]:
            if (
                seller.get("login") == credentials.login
                and seller.get("secret") == credentials.secret
                and seller.get("status") == SELLER_ACTIVE
            ):
                logger.info("Login succeeded for %s", credentials.login)
                return seller_profile(seller)

        logger.info("Login failed for %s", credentials.login)
        raise AuthenticationError(message="Invalid credentials")

    def list_sellers(self, session: DocumentSession) -> List[Entity]:
        return [seller_profile(s) for s in session.document["sellers"]]

    def _ensure_login_free(self, session: DocumentSession, login: str, own_id: str = "") -> None:
        for seller in session.document["sellers"]:
            if seller.get("login") == login and seller.get("id") != own_id:
                raise ValidationError(
                    message=f"Login '{login}' is already taken",
                    field="login",
                )

    async def create_seller(self, session: DocumentSession, data: SellerCreate) -> Entity:
        if not data.name or not data.login or not data.secret:
            raise ValidationError(message="Name, login and secret are required")
        self._ensure_login_free(session, data.login)

        seller = {
            "id": generate_id(SELLER_ID_PREFIX),
            "name": data.name,
            "login": data.login,
            "secret": data.secret,
            "status": SELLER_ACTIVE,
            "store": data.store or NO_STORE_LABEL,
        }
        session.document["sellers"].append(seller)
        await session.commit()

        logger.info("Seller created: %s (%s)", seller["id"], seller["login"])
        return seller_profile(seller)

    async def update_seller(
        self,
        session: DocumentSession,
        seller_id: str,
        data: SellerUpdate,
    ) -> Entity:
        seller = find_by_id(session.document["sellers"], seller_id)
        if seller is None:
            raise NotFoundError(resource="seller", resource_id=seller_id)

        if data.login:
            self._ensure_login_free(session, data.login, own_id=seller_id)
        if data.status and data.status not in SELLER_STATUSES:
            raise ValidationError(
                message=f"Status must be one of: {', '.join(SELLER_STATUSES)}",
                field="status",
            )

        for field in ("name", "login", "secret", "status", "store"):
            value = getattr(data, field)
            if value:
                seller[field] = value
        await session.commit()

        logger.info("Seller updated: %s", seller_id)
        return seller_profile(seller)

    async def delete_seller(self, session: DocumentSession, seller_id: str) -> None:
        sellers = session.document["sellers"]
        seller = find_by_id(sellers, seller_id)
        if seller is None:
            raise NotFoundError(resource="seller", resource_id=seller_id)

        sellers.remove(seller)
        await session.commit()
        logger.info("Seller deleted: %s", seller_id)


seller_service = SellerService()
