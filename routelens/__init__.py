"""
RouteLens — Package Initializer
================================

What: Inline route annotations for Rails controllers, served to an editor plugin.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Resolution & Caching)   │  ← AnnotationResolver, RouteIndex
    ├─────────────────────────────────────┤
    │         Models & Schemas            │  ← Route, Annotation, Document
    ├─────────────────────────────────────┤
    │   Collaborators (Process & Files)   │  ← rails routes, tmp/routes_file.txt, app/views
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
