"""
Mushroom Hunter Backend — Middleware Package
==============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every error envelope
    carry the same correlation id.
"""
