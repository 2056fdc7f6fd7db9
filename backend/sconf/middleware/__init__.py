# Middleware package init
"""
SConf Backend - Middleware Package
==================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID set before anything logs
    2. Logging: access line with the ID, status and duration
    3. GZip / CORS: Starlette built-ins configured in main.create_app

    Responses unwind in reverse, so the X-Request-ID header is added last.
"""
