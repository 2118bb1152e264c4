"""
SalesTrack Backend — Document Cache
=====================================

What:  Holds the last-known full document and when it was last refreshed.
How:   A validity window (cache_ttl_seconds) starts at every put();
       invalidate() expires the window but keeps the document as a fallback
       for reads that cannot reach the store.
Who:   Owned by DocumentSynchronizer; nothing else writes to it.

No I/O and no locking: the synchronizer runs on a single event loop and
cache operations never suspend.
"""

import time
from typing import Callable, Optional, Tuple

from salestrack.models.document import Document


class DocumentCache:
    """
    In-memory holder for the authoritative in-process document.

    State:
        document      Last document put(), or None before the first populate
        refreshed_at  Clock reading of the last put(), or None when invalidated
    """

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._document: Optional[Document] = None
        self._refreshed_at: Optional[float] = None

    def get(self) -> Tuple[Optional[Document], bool]:
        """Return (document, is_valid); the document may be stale or None."""
        return self._document, self.is_valid()

    def put(self, document: Document) -> None:
        self._document = document
        self._refreshed_at = self._clock()

    def invalidate(self) -> None:
        """Expire the validity window; the stored document stays available."""
        self._refreshed_at = None

    def is_valid(self) -> bool:
        if self._document is None or self._refreshed_at is None:
            return False
        return (self._clock() - self._refreshed_at) < self.ttl_seconds

    def age(self) -> Optional[float]:
        """Seconds since the last put(), or None when invalidated or empty."""
        if self._refreshed_at is None:
            return None
        return self._clock() - self._refreshed_at
