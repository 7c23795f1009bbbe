"""Route domain objects and their JSON-LD translation."""

from .models import Comment, Resource, Route, TrackPoint
from .translator import RouteTranslator, parse_route, route_to_jsonld

__all__ = [
    "Comment",
    "Resource",
    "Route",
    "TrackPoint",
    "RouteTranslator",
    "parse_route",
    "route_to_jsonld",
]
