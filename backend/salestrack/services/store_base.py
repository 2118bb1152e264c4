"""
SalesTrack Backend — Abstract Document Store Interface
========================================================

What:  Abstract base class for versioned blob stores holding the document.
How:   Concrete stores (GitHub contents API, local file) implement fetch()
       and store(); the synchronizer only talks to this interface.
Who:   Called by DocumentSynchronizer.

Contract:
    - Stores are stateless with respect to the document: they keep no copy
      and no version token between calls.
    - Version tokens are opaque strings produced by the store.
    - Failures are reported with the StoreError subclasses so the caller
      can tell "nothing there yet", "someone wrote first" and "store
      unreachable" apart.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from salestrack.models.document import Document


@dataclass
class StoredDocument:
    """A fetched document together with the version token it was read at."""

    content: Document
    version: str


class DocumentStore(ABC):
    """
    Versioned key-value store addressed by path.

    Implementations:
        - GitHubDocumentStore: GitHub repository contents API (default)
        - FileDocumentStore: JSON file on local disk
    """

    #: Short backend name reported by the health endpoint.
    name: str = "abstract"

    @abstractmethod
    async def fetch(self, path: str) -> StoredDocument:
        """
        Read the document stored at `path`.

        Returns:
            StoredDocument with the decoded content and its version token.

        Raises:
            DocumentNotFoundError: nothing is stored at `path` (expected on
                first start, not a failure).
            TransportError: the store could not be reached or returned
                something unreadable.
        """
        ...

    @abstractmethod
    async def store(
        self,
        path: str,
        content: Document,
        expected_version: Optional[str],
    ) -> str:
        """
        Write the whole document at `path`.

        Args:
            path: Document location.
            content: Full document; no partial writes exist.
            expected_version: Token the caller last observed. None means
                create; the store decides whether an existing object makes
                that a conflict.

        Returns:
            The new version token.

        Raises:
            VersionConflictError: `expected_version` is stale.
            TransportError: any other failure.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the store is reachable and the credentials work."""
        ...

    async def aclose(self) -> None:
        """Release transport resources. Default: nothing to release."""
        return None
