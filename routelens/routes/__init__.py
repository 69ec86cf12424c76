# Routes package init
"""
RouteLens — API Routes Package
===============================

What:  HTTP route handlers the editor plugin calls.

Route Inventory:
    - documents.py:    POST /api/annotations          (annotations for a document)
                       POST /api/documents/activated  (editor switch → invalidate)
                       POST /api/documents/saved      (save → regenerate for routes.rb)
    - routes_dump.py:  POST /api/routes/regenerate    (rebuild the route dump)
    - health.py:       GET  /health                   (service health check)

Design Principle:
    Routes stay thin: they translate HTTP to service calls. Caching and
    resolution rules live in routelens.services.
"""
