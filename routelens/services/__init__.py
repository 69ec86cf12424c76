# Services package init
"""
RouteLens — Services Layer
===========================

What:  The route-resolution and caching core, independent of HTTP.

Service Inventory:
    - route_parser:        parse_routes() for the `rails routes` dump
    - sources_base:        RouteSource / ViewSource collaborator interfaces
    - route_dump_service:  RouteDumpService, reads and regenerates tmp/routes_file.txt
    - view_locator:        ViewLocator, finds app/views/<controller>/<action>.*
    - route_index:         RouteIndex, per (workspace, controller) route cache
    - annotation_service:  AnnotationResolver, per document annotation cache
    - notifier:            HostNotifier, user-visible warnings
"""
