"""
SalesTrack Backend — Health, Banner and Sync Routes
=====================================================

What:  Service health for probes, a root banner, and a manual refresh.

Route Inventory:
    GET  /health           store reachability + synchronizer state
    GET  /                 banner with collection counts (smoke test)
    POST /api/owner/sync   drop the cache window and refetch the document

Status levels:
    healthy     store reachable
    degraded    store unreachable but a cached document can be served
    unhealthy   store unreachable and nothing cached (reads are empty)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from salestrack import __version__
from salestrack.dependencies import (
    DocumentSession,
    get_document_session,
    get_fresh_document_session,
    get_synchronizer,
)
from salestrack.models.document import COLLECTIONS
from salestrack.schemas.entities import HealthResponse
from salestrack.services.synchronizer import DocumentSynchronizer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    synchronizer: DocumentSynchronizer = Depends(get_synchronizer),
) -> HealthResponse:
    reachable = await synchronizer.store.health_check()
    sync_state = synchronizer.status()

    if reachable:
        overall = "healthy"
    elif sync_state["cached"]:
        overall = "degraded"
    else:
        overall = "unhealthy"
        logger.warning("Health check: store unreachable and nothing cached")

    return HealthResponse(
        status=overall,
        version=__version__,
        store="reachable" if reachable else "unreachable",
        sync=sync_state,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get("/", summary="Service banner")
async def root(session: DocumentSession = Depends(get_document_session)) -> dict:
    return {
        "success": True,
        "message": "SalesTrack backend running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "counts": {name: len(session.document[name]) for name in COLLECTIONS},
    }


@router.post("/api/owner/sync", summary="Force a refresh from the document store")
async def force_sync(session: DocumentSession = Depends(get_fresh_document_session)) -> dict:
    return {
        "success": True,
        "sync": session.synchronizer.status(),
        "counts": {name: len(session.document[name]) for name in COLLECTIONS},
    }
