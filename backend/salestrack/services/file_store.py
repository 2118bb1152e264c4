"""
SalesTrack Backend — Local File Document Store
================================================

What:  Keeps the document as a JSON file on local disk.
How:   Async file I/O with aiofiles; the version token is the SHA-256 of the
       stored bytes, so a write whose expected version no longer matches the
       file is rejected exactly like a stale GitHub sha.
Who:   Created by the app factory when STORE_BACKEND=file (local development,
       offline demos, integration tests).

Layout:
    <file_store_root>/<document_path>      e.g. ./data/database.json
"""

import asyncio
import hashlib
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles

from salestrack.codec import dump_document, load_document
from salestrack.config import settings
from salestrack.exceptions import (
    DocumentNotFoundError,
    TransportError,
    VersionConflictError,
)
from salestrack.models.document import Document
from salestrack.services.store_base import DocumentStore, StoredDocument

logger = logging.getLogger(__name__)


def _version_of(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


class FileDocumentStore(DocumentStore):
    """
    Versioned document store on the local file system.

    The compare-and-write in store() runs under an asyncio.Lock, so
    concurrent requests in one process see proper version conflicts. Separate
    processes sharing the file are not coordinated.
    """

    name = "file"

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.file_store_root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self._write_lock = asyncio.Lock()
        logger.info("FileDocumentStore initialized with root=%s", self.root)

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        try:
            target.relative_to(self.root)
        except ValueError:
            raise TransportError(message="Document path escapes the store root", path=path) from None
        return target

    async def _read_bytes(self, target: Path) -> Optional[bytes]:
        try:
            async with aiofiles.open(target, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to read %s: %s", target, e)
            raise TransportError(
                message="Could not read the document file",
                path=str(target),
                context={"os_error": str(e)},
            ) from e

    async def fetch(self, path: str) -> StoredDocument:
        target = self._resolve(path)
        raw = await self._read_bytes(target)
        if raw is None:
            raise DocumentNotFoundError(path=path)
        try:
            content = load_document(raw.decode("utf-8"))
        except ValueError as e:
            raise TransportError(
                message="Stored document could not be decoded",
                path=path,
                context={"error": str(e)},
            ) from e
        return StoredDocument(content=content, version=_version_of(raw))

    async def store(
        self,
        path: str,
        content: Document,
        expected_version: Optional[str],
    ) -> str:
        target = self._resolve(path)
        raw = dump_document(content).encode("utf-8")

        async with self._write_lock:
            current = await self._read_bytes(target)
            current_version = _version_of(current) if current is not None else None
            if current_version != expected_version:
                logger.warning(
                    "Version conflict storing %s (expected %s, found %s)",
                    path,
                    expected_version,
                    current_version,
                )
                raise VersionConflictError(path=path, expected_version=expected_version)

            tmp_path = target.with_name(target.name + ".tmp")
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(tmp_path, "wb") as f:
                    await f.write(raw)
                os.replace(tmp_path, target)
            except OSError as e:
                logger.error("Failed to write %s: %s", target, e)
                raise TransportError(
                    message="Could not write the document file",
                    path=path,
                    context={"os_error": str(e)},
                ) from e

        new_version = _version_of(raw)
        logger.info("Stored %s (%d bytes) at version %s", path, len(raw), new_version[:7])
        return new_version

    async def health_check(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)
