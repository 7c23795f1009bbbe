"""Route domain objects."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TrackPoint:
    """A point of a route's itinerary."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class Comment:
    """Reference to a comment document on a POD."""

    uri: str


@dataclass(frozen=True)
class Resource:
    """Reference to a media resource (photo, video) on a POD."""

    uri: str


@dataclass
class Route:
    """A route with its itinerary, media and comments.

    Attributes:
        name: Route name
        description: Free text description
        itinerary: Ordered track points
        resources: Attached media
        comments: Attached comments
    """

    name: str = ""
    description: str = ""
    itinerary: list[TrackPoint] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
