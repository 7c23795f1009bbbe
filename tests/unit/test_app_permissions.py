"""
Unit tests for the application permission gate.

Tests cover:
- Subset check of granted vs required modes
- Notification when modes are missing or the app is not trusted
- Reading trusted-app modes from a profile document
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from viade_pod.acl import Mode
from viade_pod.app_permissions import (
    ErrorMessage,
    ProfileAppPermissionSource,
    check_app_permissions,
    check_permissions,
    check_specific_app_permission,
)
from viade_pod.config import Settings
from viade_pod.pod import PodClient

WEB_ID = "https://alice.example/profile/card#me"
MESSAGE = ErrorMessage(
    message="Viade needs full access to your POD",
    title="Missing permissions",
    label="Learn more",
    href="https://viade.example/help/permissions",
)


def make_source(modes):
    source = MagicMock()
    source.app_modes = AsyncMock(return_value=modes)
    return source


class TestCheckAppPermissions:
    """Tests for check_app_permissions."""

    def test_all_granted(self):
        """Superset of required modes passes."""
        assert check_app_permissions(
            [Mode.APPEND, Mode.READ, Mode.WRITE, Mode.CONTROL],
            [Mode.READ, Mode.WRITE],
        )

    def test_missing_mode(self):
        """Any missing mode fails."""
        assert not check_app_permissions([Mode.READ], [Mode.READ, Mode.WRITE])

    def test_nothing_required(self):
        """Empty requirement is always met."""
        assert check_app_permissions([], [])


class TestCheckPermissions:
    """Tests for check_permissions."""

    @pytest.mark.asyncio
    async def test_full_grant_does_not_notify(self):
        """All four modes granted: no notification."""
        notify = MagicMock()
        source = make_source([Mode.APPEND, Mode.READ, Mode.WRITE, Mode.CONTROL])

        assert await check_permissions(source, WEB_ID, MESSAGE, notify) is True
        notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_control_notifies(self):
        """Missing Control triggers the notification."""
        notify = MagicMock()
        source = make_source([Mode.APPEND, Mode.READ, Mode.WRITE])

        assert await check_permissions(source, WEB_ID, MESSAGE, notify) is False
        notify.assert_called_once_with(MESSAGE)

    @pytest.mark.asyncio
    async def test_untrusted_app_notifies(self):
        """No trusted-app entry is treated as missing permissions."""
        notify = MagicMock()

        assert await check_permissions(make_source(None), WEB_ID, MESSAGE, notify) is False
        notify.assert_called_once_with(MESSAGE)

    @pytest.mark.asyncio
    async def test_default_notifier_logs(self, caplog):
        """Without a notifier the message is logged."""
        await check_permissions(make_source([]), WEB_ID, MESSAGE)
        assert "Missing permissions" in caplog.text

    @pytest.mark.asyncio
    async def test_specific_permission(self):
        """Single-mode check."""
        source = make_source([Mode.READ])
        assert await check_specific_app_permission(source, WEB_ID, Mode.READ) is True
        assert await check_specific_app_permission(source, WEB_ID, Mode.WRITE) is False
        assert await check_specific_app_permission(make_source(None), WEB_ID, Mode.READ) is False


class TestProfileAppPermissionSource:
    """Tests for reading trusted apps from the profile."""

    @pytest_asyncio.fixture
    async def profile_pod(self):
        """(profile document, PodClient serving it)."""
        profile = {}

        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://alice.example/profile/card"
            return httpx.Response(200, json=profile)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        yield profile, PodClient(Settings(), client=client)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_nested_trusted_app(self, profile_pod):
        """Trusted app nested in the profile node."""
        profile, pod = profile_pod
        profile.update(
            {
                "@id": WEB_ID,
                "acl:trustedApp": [
                    {
                        "acl:origin": {"@id": "https://other.example"},
                        "acl:mode": [{"@id": "acl:Read"}],
                    },
                    {
                        "acl:origin": {"@id": "https://viade.example/"},
                        "acl:mode": [
                            {"@id": "acl:Read"},
                            {"@id": "acl:Write"},
                            {"@id": "acl:Append"},
                        ],
                    },
                ],
            }
        )
        source = ProfileAppPermissionSource(pod, Settings(app_origin="https://viade.example"))

        assert await source.app_modes(WEB_ID) == [Mode.READ, Mode.WRITE, Mode.APPEND]

    @pytest.mark.asyncio
    async def test_referenced_trusted_app(self, profile_pod):
        """Trusted app referenced by @id in a graph."""
        profile, pod = profile_pod
        profile.update(
            {
                "@graph": [
                    {"@id": WEB_ID, "acl:trustedApp": {"@id": "_:b0"}},
                    {
                        "@id": "_:b0",
                        "acl:origin": "https://viade.example",
                        "acl:mode": ["acl:Control"],
                    },
                ]
            }
        )
        source = ProfileAppPermissionSource(pod, Settings(app_origin="https://viade.example"))

        assert await source.app_modes(WEB_ID) == [Mode.CONTROL]

    @pytest.mark.asyncio
    async def test_app_not_trusted(self, profile_pod):
        """No matching origin returns None."""
        profile, pod = profile_pod
        profile.update({"@id": WEB_ID})
        source = ProfileAppPermissionSource(pod, Settings(app_origin="https://viade.example"))

        assert await source.app_modes(WEB_ID) is None
