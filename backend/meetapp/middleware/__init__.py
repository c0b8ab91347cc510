# Middleware package init
"""
Meetapp Backend: Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    Responses travel the chain in reverse, so the request ID header is set on
    the way out and the access log sees the final status code and duration.
"""
