"""
Application permission gate.

A Solid user grants the Viade application access by listing it as an
acl:trustedApp in their WebID profile. This module checks that those
app-level modes cover what the application needs, and notifies the user
when they do not.

App permissions are distinct from per-resource ACL entries; see
viade_pod.acl for the latter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Protocol, runtime_checkable

from .acl.entries import ALL_MODES, Mode
from .config import Settings
from .pod import PodClient

logger = logging.getLogger(__name__)

REQUIRED_APP_MODES: tuple[Mode, ...] = ALL_MODES


@dataclass(frozen=True)
class ErrorMessage:
    """User-facing notification shown when app permissions are missing.

    Attributes:
        message: Body text
        title: Heading
        label: Text of the help link
        href: Help link target
    """

    message: str
    title: str
    label: str | None = None
    href: str | None = None


Notifier = Callable[[ErrorMessage], None]


def log_notifier(error_message: ErrorMessage) -> None:
    """Default notifier: log the message."""
    logger.warning(f"{error_message.title}: {error_message.message}")


@runtime_checkable
class AppPermissionSource(Protocol):
    """Source of a user's granted app modes."""

    async def app_modes(self, web_id: str) -> Optional[list[Mode]]:
        """Modes granted to the app, or None if the app is not trusted."""
        ...


def _local(name: str) -> str:
    return name.rsplit("#", 1)[-1].rsplit(":", 1)[-1]


def _values(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _ref(value: Any) -> Any:
    return value.get("@id", value.get("@value")) if isinstance(value, dict) else value


class ProfileAppPermissionSource:
    """Reads trusted-app modes from the WebID profile document.

    Looks for the acl:trustedApp whose acl:origin equals settings.app_origin.
    Trusted apps may be nested in the profile node or referenced by @id
    elsewhere in the graph.
    """

    def __init__(self, pod: PodClient, settings: Settings | None = None) -> None:
        self._pod = pod
        self.settings = settings or Settings()

    async def app_modes(self, web_id: str) -> Optional[list[Mode]]:
        profile_url = web_id.split("#", 1)[0]
        document = await self._pod.retrieve_json(profile_url)

        nodes = document if isinstance(document, list) else document.get("@graph", [document])
        nodes = [n for n in nodes if isinstance(n, dict)]
        by_id = {n["@id"]: n for n in nodes if isinstance(n.get("@id"), str)}

        origin = self.settings.app_origin.rstrip("/")
        for node in nodes:
            for key, value in node.items():
                if _local(key) != "trustedApp":
                    continue
                for app in _values(value):
                    if isinstance(app, dict) and len(app) == 1 and "@id" in app:
                        app = by_id.get(app["@id"], app)
                    if not isinstance(app, dict):
                        continue
                    if self._origin(app) == origin:
                        return self._modes(app)
        return None

    @staticmethod
    def _origin(app: dict[str, Any]) -> str | None:
        for key, value in app.items():
            if _local(key) == "origin":
                refs = [_ref(v) for v in _values(value)]
                if refs and isinstance(refs[0], str):
                    return refs[0].rstrip("/")
        return None

    @staticmethod
    def _modes(app: dict[str, Any]) -> list[Mode]:
        modes: list[Mode] = []
        for key, value in app.items():
            if _local(key) != "mode":
                continue
            for raw in _values(value):
                try:
                    mode = Mode.parse(_ref(raw))
                except (ValueError, AttributeError):
                    logger.warning(f"Ignoring unknown app mode {raw!r}")
                    continue
                if mode not in modes:
                    modes.append(mode)
        return modes


def check_app_permissions(granted: Iterable[Mode], required: Iterable[Mode]) -> bool:
    """True if every required mode is granted."""
    return set(required) <= set(granted)


async def check_specific_app_permission(
    source: AppPermissionSource,
    web_id: str,
    mode: Mode,
) -> bool:
    """Check a single app mode."""
    modes = await source.app_modes(web_id)
    return modes is not None and mode in modes


async def check_permissions(
    source: AppPermissionSource,
    web_id: str,
    error_message: ErrorMessage,
    notify: Notifier | None = None,
    required: Iterable[Mode] = REQUIRED_APP_MODES,
) -> bool:
    """Check that the app holds every required mode, notifying if not.

    Missing permissions are reported through notify, never raised.

    Args:
        source: Where granted app modes come from
        web_id: User being checked
        error_message: Notification content
        notify: Callback shown the error message (defaults to logging)
        required: Modes the app needs (Append, Read, Write, Control)

    Returns:
        True if all required modes are granted
    """
    modes = await source.app_modes(web_id)
    if modes is not None and check_app_permissions(modes, required):
        return True

    (notify or log_notifier)(error_message)
    return False
