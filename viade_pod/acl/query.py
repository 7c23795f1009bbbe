"""Permission queries over a fetched ACL entry list."""

from __future__ import annotations

from typing import Iterable, Sequence

from .entries import AgentSelector, Mode, PermissionEntry


def has_mode(
    entries: Sequence[PermissionEntry],
    selector: AgentSelector,
    mode: Mode,
) -> bool:
    """Check whether a mode is already granted to the selected agents.

    Any matching entry granting the mode is enough, so ACLs carrying
    duplicate entries for the same agents still answer correctly.

    Args:
        entries: Current ACL entries
        selector: Everyone, or a specific agent
        mode: Required mode

    Returns:
        True if some entry matching the selector grants the mode
    """
    return any(selector.matches(entry) and mode in entry.modes for entry in entries)


def has_modes(
    entries: Sequence[PermissionEntry],
    selector: AgentSelector,
    modes: Iterable[Mode],
) -> bool:
    """Check that every mode in modes is granted to the selected agents."""
    return all(has_mode(entries, selector, mode) for mode in modes)
