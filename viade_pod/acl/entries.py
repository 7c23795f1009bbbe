"""
ACL entry types for Solid POD resources.

This module handles the in-memory shape of a resource's ACL document:
- Access modes (Read, Write, Append, Control)
- Permission entries (a set of agents, or everyone, plus modes)
- Agent selectors used to pick the entries relevant to a grant

Invariants:
    - agents=None means everyone (acl:agentClass foaf:Agent)
    - An entry's mode list has no duplicates
    - Entry lists are fetched fresh per reconciliation, never cached

How to change safely:
    - Mode values are the W3C ACL local names; never rename them
    - Keep to_dict()/from_dict() symmetric with what stores return
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Access modes of the W3C ACL vocabulary."""

    READ = "Read"
    WRITE = "Write"
    APPEND = "Append"
    CONTROL = "Control"

    @classmethod
    def parse(cls, value: str | Mode) -> Mode:
        """Parse a mode from its name, local name or full IRI.

        Args:
            value: "Read", "READ", "acl:Read" or "http://www.w3.org/ns/auth/acl#Read"

        Returns:
            Parsed Mode

        Raises:
            ValueError: If value names no known mode
        """
        if isinstance(value, Mode):
            return value
        name = value.rsplit("#", 1)[-1].rsplit(":", 1)[-1]
        for mode in cls:
            if name.lower() == mode.value.lower():
                return mode
        raise ValueError(f"Invalid access mode: {value}")


ALL_MODES: tuple[Mode, ...] = (Mode.APPEND, Mode.READ, Mode.WRITE, Mode.CONTROL)


def unique_modes(modes: Iterable[Mode]) -> list[Mode]:
    """Drop repeated modes, keeping first-seen order."""
    seen: list[Mode] = []
    for mode in modes:
        if mode not in seen:
            seen.append(mode)
    return seen


@dataclass
class PermissionEntry:
    """One authorization in a resource's ACL document.

    Attributes:
        agents: WebIDs granted access, or None for everyone
        modes: Granted access modes
    """

    agents: list[str] | None
    modes: list[Mode] = field(default_factory=list)

    @property
    def is_everyone(self) -> bool:
        return self.agents is None

    def copy(self) -> PermissionEntry:
        return PermissionEntry(
            agents=None if self.agents is None else list(self.agents),
            modes=list(self.modes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "agents": None if self.agents is None else list(self.agents),
            "modes": [m.value for m in self.modes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PermissionEntry:
        """Create from dictionary.

        Unknown modes are skipped with a warning; a lone agent string is
        accepted as a one-agent list.
        """
        agents = data.get("agents")
        if isinstance(agents, str):
            agents = [agents]

        modes: list[Mode] = []
        for raw in data.get("modes") or []:
            try:
                modes.append(Mode.parse(raw))
            except ValueError:
                logger.warning(f"Ignoring unknown access mode {raw!r}")

        return cls(
            agents=None if agents is None else list(agents),
            modes=unique_modes(modes),
        )


@dataclass(frozen=True)
class AgentSelector:
    """Picks the entries a grant is about.

    Either everyone (web_id is None) or one named agent.

    Example:
        >>> AgentSelector.agent("https://alice.example/profile/card#me")
        >>> AgentSelector.everyone()
    """

    web_id: str | None = None

    @classmethod
    def everyone(cls) -> AgentSelector:
        return cls(web_id=None)

    @classmethod
    def agent(cls, web_id: str) -> AgentSelector:
        if not web_id:
            raise ValueError("Agent selector needs a WebID")
        return cls(web_id=web_id)

    @property
    def is_everyone(self) -> bool:
        return self.web_id is None

    def matches(self, entry: PermissionEntry) -> bool:
        """Check whether an entry belongs to this selector.

        The everyone selector matches entries with agents=None. An agent
        selector matches entries whose agent list equals or contains the
        WebID.
        """
        if self.is_everyone:
            return entry.agents is None
        if entry.agents is None:
            return False
        if isinstance(entry.agents, str):
            return entry.agents == self.web_id
        return self.web_id in entry.agents

    def __str__(self) -> str:
        return "everyone" if self.is_everyone else str(self.web_id)
