"""
Permission merge for ACL reconciliation.

Computes the entry list to persist when a grant is missing. The ACL document
has no partial-update primitive, so the result is always a complete
replacement list.

Template selection for agent grants:
    LEGACY_MODE_COUNT - candidates are entries holding the primary (first)
        requested mode whose mode count is between 1 and the number of modes
        requested; the first candidate wins. Matching is by mode-set size, so
        a {Read, Append} entry serves as template for a {Read, Write} grant
        and its Append mode is replaced.
    EVERYONE_FIRST - the everyone entry if present, else the first named
        entry whose modes are a subset of the requested modes.

Actions once a template is chosen:
    EVERYONE template - a new entry {agents: [agent], modes: requested} is
        appended; the everyone entry itself is never modified.
    NAMED_AGENT template - the agent is appended to that entry's agents and
        its modes become the requested modes. The agent is appended even when
        already listed unless dedupe_agents is set.
    No template - a new agent entry is appended.

Invariants:
    - Input lists are never mutated
    - Requested modes always land together on a single entry
    - Entries other than the template keep their position and content
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from ..config import TemplateStrategy
from .entries import AgentSelector, Mode, PermissionEntry, unique_modes

logger = logging.getLogger(__name__)


class TemplateKind(Enum):
    """Kind of entry used as the template for a grant."""

    EVERYONE = "everyone"
    NAMED_AGENT = "named_agent"


@dataclass
class MergeOutcome:
    """Result of a merge.

    Attributes:
        entries: Complete list to persist
        template_kind: Kind of template entry used, None if none was found
        template_index: Position of the template in the input list
    """

    entries: list[PermissionEntry] = field(default_factory=list)
    template_kind: TemplateKind | None = None
    template_index: int | None = None


def template_kind(entry: PermissionEntry) -> TemplateKind:
    """Classify an entry by inspecting its agents."""
    return TemplateKind.EVERYONE if entry.agents is None else TemplateKind.NAMED_AGENT


def find_template(
    entries: Sequence[PermissionEntry],
    modes: Sequence[Mode],
    strategy: TemplateStrategy = TemplateStrategy.LEGACY_MODE_COUNT,
) -> int | None:
    """Find the index of the template entry for an agent grant.

    Args:
        entries: Current ACL entries
        modes: Modes being granted, primary mode first
        strategy: Template selection rule

    Returns:
        Index into entries, or None if no entry qualifies
    """
    if strategy == TemplateStrategy.EVERYONE_FIRST:
        for i, entry in enumerate(entries):
            if entry.agents is None:
                return i
        wanted = set(modes)
        for i, entry in enumerate(entries):
            if entry.modes and set(entry.modes) <= wanted:
                return i
        return None

    primary = modes[0]
    for i, entry in enumerate(entries):
        if primary in entry.modes and 1 <= len(entry.modes) <= len(modes):
            return i
    return None


def merge_modes(
    entries: Sequence[PermissionEntry],
    selector: AgentSelector,
    modes_to_grant: Sequence[Mode],
    *,
    strategy: TemplateStrategy = TemplateStrategy.LEGACY_MODE_COUNT,
    dedupe_agents: bool = False,
) -> MergeOutcome:
    """Compute the new entry list granting modes_to_grant to the selector.

    Args:
        entries: Current ACL entries (left untouched)
        selector: Everyone, or the agent to add
        modes_to_grant: Modes that must end up together on one entry
        strategy: Template selection rule for agent grants
        dedupe_agents: Do not append an agent the template already lists

    Returns:
        MergeOutcome with the replacement list

    Raises:
        ValueError: If modes_to_grant is empty
    """
    modes = unique_modes(modes_to_grant)
    if not modes:
        raise ValueError("Nothing to grant: modes_to_grant is empty")

    new_entries = [entry.copy() for entry in entries]

    agent = selector.web_id
    if agent is None:
        for i, entry in enumerate(new_entries):
            if entry.agents is None:
                entry.modes = unique_modes([*entry.modes, *modes])
                return MergeOutcome(new_entries, TemplateKind.EVERYONE, i)
        new_entries.append(PermissionEntry(agents=None, modes=list(modes)))
        return MergeOutcome(new_entries)

    index = find_template(new_entries, modes, strategy)
    if index is None:
        logger.debug(f"No template entry for {agent}, adding a new entry")
        new_entries.append(PermissionEntry(agents=[agent], modes=list(modes)))
        return MergeOutcome(new_entries)

    template = new_entries[index]
    kind = template_kind(template)

    if kind == TemplateKind.EVERYONE:
        new_entries.append(PermissionEntry(agents=[agent], modes=list(modes)))
    else:
        agents = list(template.agents or [])
        if not (dedupe_agents and agent in agents):
            agents.append(agent)
        new_entries[index] = PermissionEntry(agents=agents, modes=list(modes))

    return MergeOutcome(new_entries, kind, index)
