"""
SalesTrack Backend — Middleware Package
========================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    - Request ID first so the access log and error envelopes carry it
    - Logging measures the full handler time, store round-trips included
"""
