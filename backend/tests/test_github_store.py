"""
SalesTrack Backend — GitHub Document Store Tests (Mocked)
===========================================================

What:  Tests for GitHubDocumentStore against httpx.MockTransport.
Why:   Tests should not call the real GitHub API (network, rate limits, token).
How:   A handler function plays the contents API; tenacity waits are zeroed.

What we test:
    ✅ fetch decodes base64 content and returns the blob sha
    ✅ Large files fall back to the raw media type
    ✅ Status mapping: 404 → not found, 409/422(sha) → conflict, rest → transport
    ✅ PUT body carries sha only when updating
    ✅ Network errors are retried, then surface as TransportError
    ✅ Malformed success bodies and other httpx errors become TransportError
    ❌ Real API calls
"""

import json

import httpx
import pytest

from salestrack.codec import encode_document
from salestrack.exceptions import DocumentNotFoundError, TransportError, VersionConflictError
from salestrack.services.github_store import GITHUB_RAW_ACCEPT, GitHubDocumentStore

REPO = "acme/sales-data"
CONTENTS_URL = f"/repos/{REPO}/contents/database.json"


def make_store(handler, retry_attempts=3):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://api.github.test",
    )
    return GitHubDocumentStore(
        repo=REPO,
        branch="main",
        commit_message="Update database",
        retry_attempts=retry_attempts,
        retry_min_wait=0,
        retry_max_wait=0,
        client=client,
    )


class TestFetch:

    @pytest.mark.asyncio
    async def test_fetch_decodes_content(self, sample_document):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["ref"] = request.url.params.get("ref")
            return httpx.Response(
                200,
                json={"sha": "abc123", "encoding": "base64", "content": encode_document(sample_document)},
            )

        store = make_store(handler)
        stored = await store.fetch("database.json")

        assert stored.content == sample_document
        assert stored.version == "abc123"
        assert seen == {"path": CONTENTS_URL, "ref": "main"}

    @pytest.mark.asyncio
    async def test_fetch_falls_back_to_raw_content(self, sample_document):
        """Files over 1MB come back with an empty `content` field."""

        def handler(request):
            if request.headers.get("Accept") == GITHUB_RAW_ACCEPT:
                return httpx.Response(200, text=json.dumps(sample_document))
            return httpx.Response(200, json={"sha": "big1", "encoding": "none", "content": ""})

        store = make_store(handler)
        stored = await store.fetch("database.json")

        assert stored.content == sample_document
        assert stored.version == "big1"

    @pytest.mark.asyncio
    async def test_fetch_404_is_not_found(self):
        store = make_store(lambda request: httpx.Response(404, json={"message": "Not Found"}))

        with pytest.raises(DocumentNotFoundError):
            await store.fetch("database.json")

    @pytest.mark.asyncio
    async def test_fetch_server_error_is_transport_error(self):
        store = make_store(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(TransportError) as exc_info:
            await store.fetch("database.json")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_fetch_undecodable_content_is_transport_error(self):
        store = make_store(
            lambda request: httpx.Response(
                200, json={"sha": "x", "encoding": "base64", "content": "%%%not-base64%%%"}
            )
        )

        with pytest.raises(TransportError):
            await store.fetch("database.json")


class TestStore:

    @pytest.mark.asyncio
    async def test_update_sends_sha_and_returns_new_version(self, sample_document):
        bodies = []

        def handler(request):
            assert request.method == "PUT"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"content": {"sha": "new456"}})

        store = make_store(handler)
        version = await store.store("database.json", sample_document, "old123")

        assert version == "new456"
        body = bodies[0]
        assert body["sha"] == "old123"
        assert body["branch"] == "main"
        assert body["message"] == "Update database"
        assert body["content"] == encode_document(sample_document)

    @pytest.mark.asyncio
    async def test_create_omits_sha(self, sample_document):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"content": {"sha": "first1"}})

        store = make_store(handler)
        assert await store.store("database.json", sample_document, None) == "first1"
        assert "sha" not in bodies[0]

    @pytest.mark.asyncio
    async def test_409_is_version_conflict(self, sample_document):
        store = make_store(lambda request: httpx.Response(409, json={"message": "conflict"}))

        with pytest.raises(VersionConflictError) as exc_info:
            await store.store("database.json", sample_document, "stale")
        assert exc_info.value.expected_version == "stale"

    @pytest.mark.asyncio
    async def test_422_about_sha_is_version_conflict(self, sample_document):
        store = make_store(
            lambda request: httpx.Response(
                422, json={"message": "Invalid request.\n\n\"sha\" wasn't supplied."}
            )
        )

        with pytest.raises(VersionConflictError):
            await store.store("database.json", sample_document, None)

    @pytest.mark.asyncio
    async def test_other_422_is_transport_error(self, sample_document):
        store = make_store(lambda request: httpx.Response(422, json={"message": "Invalid branch"}))

        with pytest.raises(TransportError) as exc_info:
            await store.store("database.json", sample_document, "abc")
        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_unauthorized_is_transport_error(self, sample_document):
        store = make_store(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))

        with pytest.raises(TransportError):
            await store.store("database.json", sample_document, "abc")


class TestRetry:

    @pytest.mark.asyncio
    async def test_network_error_is_retried(self, sample_document):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(
                200, json={"sha": "ok", "encoding": "base64", "content": encode_document(sample_document)}
            )

        store = make_store(handler, retry_attempts=3)
        stored = await store.fetch("database.json")

        assert stored.version == "ok"
        assert calls["n"] == 3

    @pytest.mark.asyncio
    async def test_exhausted_network_retries_raise_transport_error(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            raise httpx.ReadTimeout("timed out", request=request)

        store = make_store(handler, retry_attempts=2)

        with pytest.raises(TransportError):
            await store.fetch("database.json")
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_status_errors_are_not_retried(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            return httpx.Response(503, text="unavailable")

        store = make_store(handler)

        with pytest.raises(TransportError):
            await store.fetch("database.json")
        assert calls["n"] == 1


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_healthy_when_repo_is_readable(self):
        store = make_store(lambda request: httpx.Response(200, json={"full_name": REPO}))
        assert await store.health_check() is True

    @pytest.mark.asyncio
    async def test_unhealthy_on_bad_status(self):
        store = make_store(lambda request: httpx.Response(404, json={"message": "Not Found"}))
        assert await store.health_check() is False

    @pytest.mark.asyncio
    async def test_unhealthy_when_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        store = make_store(handler, retry_attempts=1)
        assert await store.health_check() is False


class TestMalformedResponses:

    @pytest.mark.asyncio
    async def test_success_without_sha_is_transport_error(self, sample_document):
        store = make_store(lambda request: httpx.Response(201, json={"commit": {}}))

        with pytest.raises(TransportError) as exc_info:
            await store.store("database.json", sample_document, "abc")
        assert exc_info.value.status_code == 201

    @pytest.mark.asyncio
    async def test_success_with_non_json_body_is_transport_error(self, sample_document):
        store = make_store(lambda request: httpx.Response(200, text="<html>ok</html>"))

        with pytest.raises(TransportError):
            await store.store("database.json", sample_document, "abc")

    @pytest.mark.asyncio
    async def test_non_network_http_error_is_transport_error(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            raise httpx.TooManyRedirects("redirect loop", request=request)

        store = make_store(handler)

        with pytest.raises(TransportError):
            await store.fetch("database.json")
        assert calls["n"] == 1

    @pytest.mark.asyncio
    async def test_retry_policy_emits_no_deprecation_warning(self, sample_document, recwarn):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(
                200, json={"sha": "ok", "encoding": "base64", "content": encode_document(sample_document)}
            )

        store = make_store(handler)
        await store.fetch("database.json")

        deprecations = [
            w for w in recwarn
            if issubclass(w.category, DeprecationWarning) and "tenacity" in w.filename + str(w.message)
        ]
        assert deprecations == []
