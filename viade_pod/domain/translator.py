"""
Translation between route JSON-LD documents and Route objects.

Route documents follow the Viade JSON-LD shape:

    {
        "@type": "viade:Route",
        "name": "...",
        "description": "...",
        "points": [{"latitude": 43.36, "longitude": -5.85}, ...],
        "comments": [{"@id": "..."}],
        "media": [{"@id": "..."}]
    }

Folder layout under the POD root (derived from the WebID):
    viade/routes/   the user's own routes
    viade/shared/   per-friend lists of routes shared with them

Invariants:
    - Unknown keys are ignored; missing keys produce empty values
    - The POD root comes from stripping the profile suffix, never discovery
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any

from ..config import Settings
from ..errors import NotFoundError, ValidationError
from ..pod import PodClient
from .models import Comment, Resource, Route, TrackPoint

logger = logging.getLogger(__name__)

ROUTE_CONTEXT: dict[str, Any] = {
    "@version": 1.1,
    "comments": {"@id": "viade:comments", "@type": "@id"},
    "description": {"@id": "schema:description", "@type": "xsd:string"},
    "media": {"@container": "@list", "@id": "viade:media"},
    "name": {"@id": "schema:name", "@type": "xsd:string"},
    "points": {"@container": "@list", "@id": "viade:points"},
    "latitude": {"@id": "schema:latitude", "@type": "xsd:double"},
    "longitude": {"@id": "schema:longitude", "@type": "xsd:double"},
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "schema": "http://schema.org/",
    "viade": "http://arquisoft.github.io/viadeSpec/",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
}


def _refs(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list", field_name=key)
    refs = []
    for item in value:
        ref = item.get("@id") if isinstance(item, dict) else item
        if not isinstance(ref, str):
            raise ValidationError(f"'{key}' entries need an @id", field_name=key)
        refs.append(ref)
    return refs


def _text(value: Any, key: str) -> str:
    """A plain string, or the @value of a JSON-LD value object."""
    if isinstance(value, dict):
        value = value.get("@value")
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string", field_name=key)
    return value


def parse_route(document: Any) -> Route:
    """Build a Route from a route JSON-LD document.

    Raises:
        ValidationError: If the document or one of its lists is malformed
    """
    if not isinstance(document, dict):
        raise ValidationError("Route document must be a JSON object")

    route = Route()
    for key, value in document.items():
        if key == "name":
            route.name = _text(value, key)
        elif key == "description":
            route.description = _text(value, key)
        elif key == "points":
            if not isinstance(value, list):
                raise ValidationError("'points' must be a list", field_name="points")
            try:
                route.itinerary = [
                    TrackPoint(float(p["latitude"]), float(p["longitude"])) for p in value
                ]
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(f"Invalid track point: {e}", field_name="points") from e
        elif key == "comments":
            route.comments = [Comment(uri) for uri in _refs(value, key)]
        elif key == "media":
            route.resources = [Resource(uri) for uri in _refs(value, key)]

    return route


def route_to_jsonld(route: Route) -> dict[str, Any]:
    """Serialize a Route as a Viade JSON-LD document."""
    return {
        "@context": dict(ROUTE_CONTEXT),
        "@type": "viade:Route",
        "name": route.name,
        "description": route.description,
        "points": [{"latitude": p.latitude, "longitude": p.longitude} for p in route.itinerary],
        "comments": [{"@id": c.uri} for c in route.comments],
        "media": [{"@id": r.uri} for r in route.resources],
    }


def route_filename(route: Route) -> str:
    """File name for a new route document."""
    slug = re.sub(r"[^a-z0-9]+", "-", route.name.lower()).strip("-") or "route"
    return f"{slug}-{uuid.uuid4().hex[:8]}.jsonld"


class RouteTranslator:
    """Loads and saves routes on a user's POD.

    Example:
        >>> async with PodClient(settings) as pod:
        ...     translator = RouteTranslator(pod, settings)
        ...     urls = await translator.load_all_routes(web_id)
        ...     route = await translator.load_map_info(urls[0])
    """

    def __init__(self, pod: PodClient, settings: Settings | None = None) -> None:
        self._pod = pod
        self.settings = settings or Settings()

    def routes_container(self, web_id: str) -> str:
        return self.settings.pod_root(web_id) + self.settings.routes_folder

    async def load_map_info(self, url: str) -> Route:
        """Load one route document."""
        return parse_route(await self._pod.retrieve_json(url))

    async def load_all_routes(self, web_id: str) -> list[str]:
        """URLs of every route in the user's routes folder."""
        try:
            return await self._pod.list_container(self.routes_container(web_id))
        except NotFoundError:
            logger.info(f"No routes folder for {web_id}")
            return []

    async def load_friend_routes(self, web_id: str, filename: str) -> list[str]:
        """Route URLs a friend listed in their shared file for us.

        Args:
            web_id: The friend's WebID
            filename: Shared file name, without extension

        Returns:
            The @id of each entry in the file's "routes" list
        """
        url = f"{self.settings.pod_root(web_id)}{self.settings.shared_folder}{filename}.jsonld"
        document = await self._pod.retrieve_json(url)
        if not isinstance(document, dict):
            raise ValidationError(f"Shared routes document at {url} must be a JSON object")
        return _refs(document.get("routes", []), "routes")

    async def save_route_to_pod(self, route: Route, web_id: str) -> str:
        """Store a route in the user's routes folder.

        Returns:
            URL of the stored document
        """
        url = self.routes_container(web_id) + route_filename(route)
        await self._pod.store_json(url, route_to_jsonld(route))
        logger.info(f"Saved route '{route.name}' to {url}")
        return url
