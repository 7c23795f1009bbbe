"""
Unit tests for route JSON-LD translation.

Tests cover:
- Parsing route documents into Route objects
- Serializing Route objects
- Loading and saving routes through a mocked PodClient
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from viade_pod.config import Settings
from viade_pod.domain import (
    Comment,
    Resource,
    Route,
    RouteTranslator,
    TrackPoint,
    parse_route,
    route_to_jsonld,
)
from viade_pod.errors import NotFoundError, ValidationError
from viade_pod.pod import PodClient

WEB_ID = "https://alice.example/profile/card#me"

ROUTE_DOC = {
    "@context": {"viade": "http://arquisoft.github.io/viadeSpec/"},
    "@type": "viade:Route",
    "name": "Picos de Europa",
    "description": "Two day hike",
    "points": [
        {"latitude": 43.1979, "longitude": -4.8517},
        {"latitude": "43.2013", "longitude": "-4.8499"},
    ],
    "comments": [{"@id": "https://alice.example/viade/comments/c1.jsonld"}],
    "media": [{"@id": "https://alice.example/viade/resources/summit.jpg"}],
    "distance": 12.5,
}


class TestParseRoute:
    """Tests for parse_route."""

    def test_parse_full_document(self):
        """All known fields are copied; unknown ones ignored."""
        route = parse_route(ROUTE_DOC)

        assert route.name == "Picos de Europa"
        assert route.description == "Two day hike"
        assert route.itinerary == [
            TrackPoint(43.1979, -4.8517),
            TrackPoint(43.2013, -4.8499),
        ]
        assert route.comments == [Comment("https://alice.example/viade/comments/c1.jsonld")]
        assert route.resources == [Resource("https://alice.example/viade/resources/summit.jpg")]

    def test_missing_fields_are_empty(self):
        """A bare document yields an empty route."""
        assert parse_route({}) == Route()

    def test_not_an_object(self):
        """Non-object documents are rejected."""
        with pytest.raises(ValidationError):
            parse_route(["not", "a", "route"])

    def test_bad_point(self):
        """Track points need latitude and longitude."""
        with pytest.raises(ValidationError) as exc:
            parse_route({"points": [{"latitude": 1.0}]})
        assert exc.value.field_name == "points"

    def test_comment_without_id(self):
        """Comment references need an @id."""
        with pytest.raises(ValidationError):
            parse_route({"comments": [{"text": "nice"}]})

    def test_value_object_name(self):
        """JSON-LD value objects are read as their @value."""
        route = parse_route(
            {
                "name": {"@value": "Picos", "@language": "es"},
                "description": {"@value": "Montaña"},
            }
        )
        assert route.name == "Picos"
        assert route.description == "Montaña"

    @pytest.mark.parametrize("value", [None, ["Picos"], 42, {"@id": "#name"}])
    def test_name_must_be_text(self, value):
        """Non-string names are rejected with the field name."""
        with pytest.raises(ValidationError) as exc:
            parse_route({"name": value})
        assert exc.value.field_name == "name"

    def test_description_must_be_text(self):
        """Null descriptions are rejected with the field name."""
        with pytest.raises(ValidationError) as exc:
            parse_route({"description": None})
        assert exc.value.field_name == "description"


class TestRouteToJsonld:
    """Tests for route_to_jsonld."""

    def test_serialize(self):
        """Serialized document parses back to the same route."""
        route = parse_route(ROUTE_DOC)
        doc = route_to_jsonld(route)

        assert doc["@type"] == "viade:Route"
        assert doc["points"][0] == {"latitude": 43.1979, "longitude": -4.8517}
        assert doc["media"] == [{"@id": "https://alice.example/viade/resources/summit.jpg"}]
        assert parse_route(doc) == route


class TestRouteTranslator:
    """Tests for RouteTranslator."""

    @pytest.fixture
    def pod(self):
        """Mock POD client."""
        return MagicMock(spec=PodClient)

    @pytest.fixture
    def translator(self, pod):
        """Translator with default settings."""
        return RouteTranslator(pod, Settings())

    @pytest.mark.asyncio
    async def test_load_map_info(self, pod, translator):
        """Route is fetched and parsed."""
        pod.retrieve_json = AsyncMock(return_value=ROUTE_DOC)

        route = await translator.load_map_info("https://alice.example/viade/routes/picos.jsonld")

        pod.retrieve_json.assert_awaited_once_with("https://alice.example/viade/routes/picos.jsonld")
        assert route.name == "Picos de Europa"

    @pytest.mark.asyncio
    async def test_load_all_routes(self, pod, translator):
        """Routes folder is listed under the POD root."""
        urls = ["https://alice.example/viade/routes/a.jsonld"]
        pod.list_container = AsyncMock(return_value=urls)

        assert await translator.load_all_routes(WEB_ID) == urls
        pod.list_container.assert_awaited_once_with("https://alice.example/viade/routes/")

    @pytest.mark.asyncio
    async def test_load_all_routes_missing_folder(self, pod, translator):
        """Missing folder means no routes."""
        pod.list_container = AsyncMock(
            side_effect=NotFoundError("gone", url="https://alice.example/viade/routes/")
        )

        assert await translator.load_all_routes(WEB_ID) == []

    @pytest.mark.asyncio
    async def test_load_friend_routes(self, pod, translator):
        """Shared file route ids are returned in order."""
        pod.retrieve_json = AsyncMock(
            return_value={
                "routes": [
                    {"@id": "https://bob.example/viade/routes/r1.jsonld"},
                    {"@id": "https://bob.example/viade/routes/r2.jsonld"},
                ]
            }
        )

        routes = await translator.load_friend_routes("https://bob.example/profile/card#me", "alice")

        pod.retrieve_json.assert_awaited_once_with("https://bob.example/viade/shared/alice.jsonld")
        assert routes == [
            "https://bob.example/viade/routes/r1.jsonld",
            "https://bob.example/viade/routes/r2.jsonld",
        ]

    @pytest.mark.asyncio
    async def test_load_friend_routes_empty(self, pod, translator):
        """Shared file without routes."""
        pod.retrieve_json = AsyncMock(return_value={})
        assert await translator.load_friend_routes(WEB_ID, "bob") == []

    @pytest.mark.asyncio
    async def test_save_route_to_pod(self, pod, translator):
        """Route is stored as JSON-LD in the routes folder."""
        pod.store_json = AsyncMock()
        route = Route(name="Picos de Europa", itinerary=[TrackPoint(43.0, -4.0)])

        url = await translator.save_route_to_pod(route, WEB_ID)

        assert url.startswith("https://alice.example/viade/routes/picos-de-europa-")
        assert url.endswith(".jsonld")
        stored_url, document = pod.store_json.await_args.args
        assert stored_url == url
        assert document["name"] == "Picos de Europa"

    @pytest.mark.asyncio
    async def test_save_loaded_value_object_route(self, pod, translator):
        """A route read with value-object fields can be saved again."""
        pod.store_json = AsyncMock()
        route = parse_route({"name": {"@value": "Picos", "@language": "es"}})

        url = await translator.save_route_to_pod(route, WEB_ID)

        assert url.startswith("https://alice.example/viade/routes/picos-")
        assert pod.store_json.await_args.args[1]["name"] == "Picos"
