"""
SalesTrack Backend — Document Synchronizer
============================================

What:  Orchestrates every read and write of the shared document.
How:   Read-through cache in front of a versioned DocumentStore; writes are
       conditional on the version observed just before, with merge-and-retry
       on divergence or conflict and fixed backoff on transport failures.
Who:   One instance per application (created by create_app(), kept on
       app.state); handed to routes through FastAPI dependencies.

Read flow:
    ┌──────────────┐ valid  ┌────────────┐
    │ cache.get()  │───────▶│ deep copy  │
    └──────┬───────┘        └────────────┘
           │ expired / forced
    ┌──────▼───────┐ not found ┌──────────────────────────┐
    │ store.fetch  │──────────▶│ seed → store(None) → put │
    └──────┬───────┘           └──────────────────────────┘
           │ transport error → stale cached copy, else empty document

Write flow (explicit loop, one retry budget shared by every recovery path):
    fetch current ─▶ diverged from baseline? ─yes─▶ merge(remote, local) ─┐
          ▲                     │ no                                      │
          │                     ▼                                         │
          └──── retry ◀── conditional store ──▶ success: put + invalidate │
                          conflict: force read │ transport: backoff       │
          ▲                                                                │
          └────────────────────────────────────────────────────────────────┘

Concurrency:
    Single event loop, no locks. The cache and the version token are shared
    by every in-flight request, so the divergence check narrows the lost-update
    window without closing it.
"""

import asyncio
import copy
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from salestrack.exceptions import (
    DocumentNotFoundError,
    StoreError,
    TransportError,
    VersionConflictError,
)
from salestrack.models.document import (
    Document,
    default_document,
    empty_document,
    normalize_document,
)
from salestrack.services.cache import DocumentCache
from salestrack.services.merge import merge_documents
from salestrack.services.store_base import DocumentStore

logger = logging.getLogger(__name__)


class DocumentSynchronizer:
    """
    Owner of the in-process copy of the document.

    Callers always receive deep copies from read(); the cached document is
    never handed out, so a request mutating its working copy cannot corrupt
    the cache or another request's view.
    """

    def __init__(
        self,
        store: DocumentStore,
        cache: Optional[DocumentCache] = None,
        path: str = "database.json",
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        seed_factory: Callable[[], Document] = default_document,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.store = store
        self.cache = cache or DocumentCache()
        self.path = path
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._seed_factory = seed_factory
        self._sleep = sleep
        # Last version token observed from the store (read or write).
        self.version: Optional[str] = None

    # ══════════════════════════════════════════════════════════════════════
    # Read
    # ══════════════════════════════════════════════════════════════════════

    async def read(self, force_refresh: bool = False) -> Document:
        """
        Return a working copy of the document. Never raises.

        Args:
            force_refresh: Skip the cache and fetch from the store.

        Returns:
            The cached document (valid window), the fetched one, the seed
            (first start), the stale cached one (store unreachable) or an
            empty document (store unreachable, nothing cached).
        """
        cached, valid = self.cache.get()
        if valid and not force_refresh:
            logger.debug("Cache hit for %s", self.path)
            return copy.deepcopy(cached)

        try:
            stored = await self.store.fetch(self.path)
        except DocumentNotFoundError:
            return await self._seed()
        except TransportError as e:
            if cached is not None:
                logger.warning(
                    "Store unreachable (%s); serving cached copy of %s",
                    e.message,
                    self.path,
                )
                return copy.deepcopy(cached)
            logger.error(
                "Store unreachable (%s) and nothing cached; serving empty document",
                e.message,
            )
            return empty_document()

        document = normalize_document(stored.content)
        self.cache.put(document)
        self.version = stored.version
        logger.info("Refreshed %s from store (version %s)", self.path, stored.version)
        return copy.deepcopy(document)

    async def _seed(self) -> Document:
        """Create the default document; adopt a concurrent seeder's if it won."""
        seed = normalize_document(self._seed_factory())
        logger.info("No document at %s; seeding default content", self.path)
        try:
            self.version = await self.store.store(self.path, seed, None)
        except VersionConflictError:
            logger.info("Document %s was created concurrently; adopting it", self.path)
            try:
                stored = await self.store.fetch(self.path)
            except StoreError as e:
                logger.warning("Could not fetch concurrently seeded document: %s", e.message)
            else:
                seed = normalize_document(stored.content)
                self.version = stored.version
        except TransportError as e:
            logger.warning("Could not persist seed document: %s", e.message)

        self.cache.put(seed)
        return copy.deepcopy(seed)

    # ══════════════════════════════════════════════════════════════════════
    # Write
    # ══════════════════════════════════════════════════════════════════════

    async def write(self, document: Document, baseline: Optional[Document] = None) -> bool:
        """
        Persist the whole document with optimistic concurrency.

        Args:
            document: The caller's mutated working copy. When a merge
                happens it is updated in place to the merged content, so the
                caller sees what was actually persisted.
            baseline: The document the caller started from. A remote
                document different from it means another writer got in
                first. Defaults to the cached document.

        Returns:
            True once the store accepted the document; False after
            max_retries retries were spent without success. The cache only
            ever receives the document on success, so a failed write leaves
            nothing behind for later reads or baselines.
        """
        if baseline is None:
            baseline, _ = self.cache.get()
        retries_remaining = self.max_retries

        while True:
            try:
                remote, remote_version = await self._fetch_current()

                if remote is not None and remote != baseline:
                    merged = merge_documents(remote, document)
                    document.clear()
                    document.update(merged)
                    baseline = remote
                    if retries_remaining > 0:
                        retries_remaining -= 1
                        logger.info(
                            "Remote %s diverged (version %s); merged local changes, "
                            "%d retries left",
                            self.path,
                            remote_version,
                            retries_remaining,
                        )
                        continue
                    logger.info(
                        "Remote %s diverged on the last attempt; storing merge directly",
                        self.path,
                    )

                new_version = await self.store.store(self.path, document, remote_version)

            except VersionConflictError:
                if retries_remaining <= 0:
                    logger.error("Giving up on %s after repeated version conflicts", self.path)
                    return False
                retries_remaining -= 1
                logger.warning(
                    "Version conflict on %s; refreshing and retrying (%d retries left)",
                    self.path,
                    retries_remaining,
                )
                await self.read(force_refresh=True)
                continue

            except TransportError as e:
                if retries_remaining <= 0:
                    logger.error("Giving up on %s: %s", self.path, e.message)
                    return False
                retries_remaining -= 1
                logger.warning(
                    "Store failure writing %s (%s); retrying in %.1fs (%d retries left)",
                    self.path,
                    e.message,
                    self.backoff_seconds,
                    retries_remaining,
                )
                await self._sleep(self.backoff_seconds)
                continue

            self.version = new_version
            self.cache.put(copy.deepcopy(document))
            # Next read refetches: other writers may already have superseded us.
            self.cache.invalidate()
            return True

    async def _fetch_current(self) -> Tuple[Optional[Document], Optional[str]]:
        """(content, version) currently stored, or (None, None) if nothing is."""
        try:
            stored = await self.store.fetch(self.path)
        except DocumentNotFoundError:
            return None, None
        return normalize_document(stored.content), stored.version

    # ══════════════════════════════════════════════════════════════════════
    # Introspection
    # ══════════════════════════════════════════════════════════════════════

    def status(self) -> Dict[str, Any]:
        cached, valid = self.cache.get()
        age = self.cache.age()
        return {
            "backend": self.store.name,
            "path": self.path,
            "version": self.version,
            "cached": cached is not None,
            "cache_valid": valid,
            "cache_age_seconds": round(age, 2) if age is not None else None,
        }
