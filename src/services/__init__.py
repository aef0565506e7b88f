"""
Service layer for route annotation.

Services orchestrate business logic between providers and outputs.
"""
from services.route_annotation import (
    CompletionCallback,
    RouteAnnotationService,
    annotate_route,
)

__all__ = [
    "RouteAnnotationService",
    "CompletionCallback",
    "annotate_route",
]
