"""
SalesTrack Backend — GitHub Contents API Document Store
=========================================================

What:  Keeps the document as a JSON file in a GitHub repository.
How:   GET/PUT on /repos/{repo}/contents/{path}; the blob `sha` is the
       version token and PUT with a stale `sha` is rejected, which gives
       optimistic concurrency for free.
Who:   Created by the app factory when STORE_BACKEND=github.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for network-level
       failures (connect errors, timeouts)
    2. HTTP status mapping:
         404         → DocumentNotFoundError
         409 / 422*  → VersionConflictError   (*422 only when about the sha)
         other !2xx  → TransportError
    3. Per-call latency logging

Status responses are never retried here; the synchronizer decides what to
do with conflicts and service errors.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from salestrack.codec import decode_document, encode_document, load_document
from salestrack.config import settings
from salestrack.exceptions import (
    DocumentNotFoundError,
    TransportError,
    VersionConflictError,
)
from salestrack.middleware.request_id import new_request_id, request_id_var
from salestrack.models.document import Document
from salestrack.services.store_base import DocumentStore, StoredDocument

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"
GITHUB_RAW_ACCEPT = "application/vnd.github.raw+json"
GITHUB_API_VERSION = "2022-11-28"


class GitHubDocumentStore(DocumentStore):
    """
    Document store backed by the GitHub repository contents API.

    Architecture:
        - One httpx.AsyncClient per store (connection pooling, shared auth
          headers); closed by aclose() at shutdown
        - Every request goes through _request(), which applies the
          tenacity retry policy to network failures only
    """

    name = "github"

    def __init__(
        self,
        repo: Optional[str] = None,
        token: Optional[str] = None,
        branch: Optional[str] = None,
        api_url: Optional[str] = None,
        commit_message: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args default to the matching settings; `client` is injected by tests
        (httpx.MockTransport) and must already carry base_url and headers.
        """
        self.repo = repo if repo is not None else settings.github_repo
        self.branch = branch or settings.github_branch
        self.commit_message = commit_message or settings.store_commit_message
        self.retry_attempts = retry_attempts or settings.store_retry_attempts
        self.retry_min_wait = (
            retry_min_wait if retry_min_wait is not None else settings.store_retry_min_wait
        )
        self.retry_max_wait = (
            retry_max_wait if retry_max_wait is not None else settings.store_retry_max_wait
        )

        if client is None:
            headers = {
                "Accept": GITHUB_ACCEPT,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
            auth_token = token if token is not None else settings.github_token
            if auth_token:
                headers["Authorization"] = f"Bearer {auth_token}"
            client = httpx.AsyncClient(
                base_url=api_url or settings.github_api_url,
                headers=headers,
                timeout=timeout or settings.store_timeout_seconds,
            )
        self.client = client

        logger.info(
            "GitHubDocumentStore initialized for repo=%s branch=%s (retry attempts=%d)",
            self.repo,
            self.branch,
            self.retry_attempts,
        )

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.repo}/contents/{path.lstrip('/')}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request, retrying network-level failures with tenacity.

        Raises:
            TransportError: all attempts failed without an HTTP response.
        """
        # Same id as the HTTP request that caused this call, when there is one.
        request_id = request_id_var.get("") or new_request_id()
        start_time = time.time()
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(httpx.TransportError),
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(
                    multiplier=self.retry_min_wait,
                    min=self.retry_min_wait,
                    max=self.retry_max_wait,
                )
                + wait_random(0, self.retry_min_wait),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    response = await self.client.request(method, url, **kwargs)
        except RetryError as e:
            cause = e.last_attempt.exception() if e.last_attempt else None
            logger.error(
                "[%s] %s %s failed after %d attempts: %s",
                request_id,
                method,
                url,
                self.retry_attempts,
                cause,
            )
            raise TransportError(
                message="GitHub API is unreachable",
                context={"request_id": request_id, "error_type": type(cause).__name__},
            ) from cause
        except httpx.HTTPError as e:
            logger.error("[%s] %s %s failed: %s", request_id, method, url, e)
            raise TransportError(
                message="GitHub request failed",
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e

        logger.debug(
            "[%s] %s %s → %d in %.0fms",
            request_id,
            method,
            url,
            response.status_code,
            (time.time() - start_time) * 1000,
        )
        return response

    async def fetch(self, path: str) -> StoredDocument:
        url = self._contents_url(path)
        response = await self._request("GET", url, params={"ref": self.branch})

        if response.status_code == 404:
            raise DocumentNotFoundError(path=path)
        if response.status_code != 200:
            raise TransportError(
                message=f"GitHub returned {response.status_code} reading the document",
                path=path,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            sha = payload["sha"]
            if payload.get("encoding") == "base64" and payload.get("content"):
                content = decode_document(payload["content"])
            else:
                # Files over 1MB come back without inline content.
                content = await self._fetch_raw(path)
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Unreadable document at %s: %s", path, e)
            raise TransportError(
                message="Stored document could not be decoded",
                path=path,
                context={"error": str(e)},
            ) from e

        logger.info("Fetched %s at version %s", path, sha[:7])
        return StoredDocument(content=content, version=sha)

    async def _fetch_raw(self, path: str) -> Document:
        response = await self._request(
            "GET",
            self._contents_url(path),
            params={"ref": self.branch},
            headers={"Accept": GITHUB_RAW_ACCEPT},
        )
        if response.status_code != 200:
            raise TransportError(
                message=f"GitHub returned {response.status_code} reading raw content",
                path=path,
                status_code=response.status_code,
            )
        return load_document(response.text)

    async def store(
        self,
        path: str,
        content: Document,
        expected_version: Optional[str],
    ) -> str:
        body: Dict[str, Any] = {
            "message": self.commit_message,
            "content": encode_document(content),
            "branch": self.branch,
        }
        if expected_version:
            body["sha"] = expected_version

        response = await self._request("PUT", self._contents_url(path), json=body)
        status = response.status_code

        if status in (200, 201):
            try:
                new_version = response.json()["content"]["sha"]
            except (KeyError, TypeError, ValueError) as e:
                logger.error("Unreadable store response for %s: %s", path, e)
                raise TransportError(
                    message="GitHub accepted the write but returned no version",
                    path=path,
                    status_code=status,
                    context={"body": response.text[:200]},
                ) from e
            logger.info(
                "Stored %s: %s → %s",
                path,
                (expected_version or "new")[:7],
                new_version[:7],
            )
            return new_version

        if status == 409 or (status == 422 and self._is_sha_complaint(response)):
            logger.warning(
                "Version conflict storing %s (expected %s, HTTP %d)",
                path,
                expected_version,
                status,
            )
            raise VersionConflictError(path=path, expected_version=expected_version)

        raise TransportError(
            message=f"GitHub returned {status} writing the document",
            path=path,
            status_code=status,
            context={"body": response.text[:200]},
        )

    @staticmethod
    def _is_sha_complaint(response: httpx.Response) -> bool:
        """422 covers both 'sha wasn't supplied' and unrelated input errors."""
        try:
            message = str(response.json().get("message", ""))
        except ValueError:
            message = response.text
        return "sha" in message.lower()

    async def health_check(self) -> bool:
        try:
            response = await self._request("GET", f"/repos/{self.repo}")
        except TransportError as e:
            logger.warning("GitHub health check failed: %s", e.message)
            return False
        if response.status_code != 200:
            logger.warning("GitHub health check returned %d", response.status_code)
            return False
        return True

    async def aclose(self) -> None:
        await self.client.aclose()
