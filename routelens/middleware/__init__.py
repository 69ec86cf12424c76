# Middleware package init
"""
RouteLens — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → Route Handler

    Request ID runs first so the logging middleware can tag its access line
    with the correlation ID.
"""
