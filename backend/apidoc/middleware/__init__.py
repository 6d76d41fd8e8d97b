# Middleware package init
"""
apidoc — Middleware Package
============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs, echoed as X-Request-ID
    2. Logging: method, path, status and duration, tagged with the request ID
    3. GZip / CORS: applied by FastAPI's bundled middleware
"""
