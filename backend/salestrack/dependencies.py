"""
SalesTrack Backend — Request Dependencies
===========================================

What:  FastAPI dependencies giving each request a document working copy.
How:   get_document_session() reads through the synchronizer, yields a
       DocumentSession, and services call session.commit() after mutating.
Who:   Injected into route handlers via Depends().

Session lifecycle:
    1. read()      working copy + snapshot of what it was read as (baseline)
    2. services mutate session.document in place
    3. commit()    synchronizer.write(document, baseline); raises
                   PersistenceError when retries are exhausted
    4. on success the baseline moves to the committed content, so a second
       commit in the same request only merges what changed since
"""

import copy
import logging
from typing import AsyncGenerator

from fastapi import Depends, Request

from salestrack.exceptions import PersistenceError
from salestrack.models.document import Document
from salestrack.services.synchronizer import DocumentSynchronizer

logger = logging.getLogger(__name__)


class DocumentSession:
    """A request-scoped working copy of the document."""

    def __init__(self, synchronizer: DocumentSynchronizer, document: Document):
        self.synchronizer = synchronizer
        self.document = document
        self.baseline: Document = copy.deepcopy(document)

    async def commit(self) -> None:
        """
        Persist the working copy.

        Raises:
            PersistenceError: the synchronizer gave up. The working copy
                keeps the mutation; the store does not have it.
        """
        ok = await self.synchronizer.write(self.document, baseline=self.baseline)
        if not ok:
            raise PersistenceError(context={"path": self.synchronizer.path})
        self.baseline = copy.deepcopy(self.document)


def get_synchronizer(request: Request) -> DocumentSynchronizer:
    """The application's synchronizer, created by create_app()."""
    return request.app.state.synchronizer


async def get_document_session(
    synchronizer: DocumentSynchronizer = Depends(get_synchronizer),
) -> AsyncGenerator[DocumentSession, None]:
    """
    Provide a document session per request.

    Mutating services commit explicitly so persistence failures reach the
    exception handlers before the response is built.
    """
    document = await synchronizer.read()
    session = DocumentSession(synchronizer, document)
    try:
        yield session
    finally:
        if session.document != session.baseline:
            logger.debug("Request ended with uncommitted changes; discarded")


async def get_fresh_document_session(
    synchronizer: DocumentSynchronizer = Depends(get_synchronizer),
) -> DocumentSession:
    """Session whose working copy was fetched bypassing the cache."""
    document = await synchronizer.read(force_refresh=True)
    return DocumentSession(synchronizer, document)
