"""
ACL reconciliation procedures.

Each procedure makes sure a resource's ACL grants a required mode profile:

    ensure_append_for_everyone   everyone       {Append}
    ensure_read_for_everyone     everyone       {Read}
    ensure_read_for_agent        one agent      {Read}
    ensure_read_write_for_agent  one agent      {Read, Write}

Steps: derive ``<path>.acl``, fetch the entries, query, and only when the
grant is missing merge and write the whole list back.

Invariants:
    - Procedures are idempotent: a satisfied grant causes no write
    - Entries are fetched fresh on every call
    - Store failures are returned in ReconcileResult.error unmodified

Concurrency:
    The read-modify-write is not atomic. Two reconcilers (or any other
    client) writing the same ACL concurrently can lose an update. Callers
    needing safety must serialize calls per resource path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..config import Settings
from ..errors import StoreError
from .entries import AgentSelector, Mode, PermissionEntry
from .merge import TemplateKind, merge_modes
from .query import has_modes
from .store import AclStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of a reconciliation.

    Attributes:
        ok: Whether the grant is in place
        written: Whether a new ACL document was written
        resource_path: Resource whose ACL was checked
        acl_path: ACL document path
        entries: Entries in effect after the call (as fetched when unchanged)
        template_kind: Template used by the merge, if a write happened
        error: Store failure, if any
    """

    ok: bool
    resource_path: str
    acl_path: str
    written: bool = False
    entries: list[PermissionEntry] = field(default_factory=list)
    template_kind: TemplateKind | None = None
    error: StoreError | None = None

    def raise_for_error(self) -> ReconcileResult:
        """Re-raise the store failure, if any; returns self otherwise."""
        if self.error is not None:
            raise self.error
        return self


class AclReconciler:
    """Reconciles ACL documents of one user's POD.

    The store is injected and owned by the caller; nothing is shared between
    reconcilers.

    Attributes:
        store: ACL store client
        web_id: Owner of the resources being reconciled
        settings: Viade settings (acl_suffix, template_strategy, dedupe_agents)

    Example:
        >>> reconciler = AclReconciler(HttpAclStore(pod), web_id)
        >>> result = await reconciler.ensure_read_for_agent(route_url, friend_web_id)
        >>> result.raise_for_error()
    """

    def __init__(
        self,
        store: AclStore,
        web_id: str,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.web_id = web_id
        self.settings = settings or Settings()

    async def ensure_append_for_everyone(self, resource_path: str) -> ReconcileResult:
        """Make sure everyone may append to resource_path (e.g. an inbox)."""
        return await self.ensure(resource_path, AgentSelector.everyone(), [Mode.APPEND])

    async def ensure_read_for_everyone(self, resource_path: str) -> ReconcileResult:
        """Make sure everyone may read resource_path."""
        return await self.ensure(resource_path, AgentSelector.everyone(), [Mode.READ])

    async def ensure_read_for_agent(self, resource_path: str, agent: str) -> ReconcileResult:
        """Make sure agent may read resource_path."""
        return await self.ensure(resource_path, AgentSelector.agent(agent), [Mode.READ])

    async def ensure_read_write_for_agent(self, resource_path: str, agent: str) -> ReconcileResult:
        """Make sure agent may read and write resource_path."""
        return await self.ensure(
            resource_path, AgentSelector.agent(agent), [Mode.READ, Mode.WRITE]
        )

    async def ensure(
        self,
        resource_path: str,
        selector: AgentSelector,
        modes: Sequence[Mode],
    ) -> ReconcileResult:
        """Grant modes to selector on resource_path unless already granted.

        Args:
            resource_path: Resource to protect
            selector: Everyone, or a specific agent
            modes: Required modes, primary mode first

        Returns:
            ReconcileResult describing what happened
        """
        acl_path = self.settings.acl_path(resource_path)

        try:
            entries = await self.store.get_permissions(self.web_id, resource_path, acl_path)
        except StoreError as e:
            return ReconcileResult(ok=False, resource_path=resource_path, acl_path=acl_path, error=e)

        if has_modes(entries, selector, modes):
            logger.debug(f"{acl_path}: {selector} already has {[m.value for m in modes]}")
            return ReconcileResult(
                ok=True, resource_path=resource_path, acl_path=acl_path, entries=entries
            )

        outcome = merge_modes(
            entries,
            selector,
            modes,
            strategy=self.settings.template_strategy,
            dedupe_agents=self.settings.dedupe_agents,
        )

        try:
            await self.store.create_acl(self.web_id, resource_path, acl_path, outcome.entries)
        except StoreError as e:
            return ReconcileResult(
                ok=False,
                resource_path=resource_path,
                acl_path=acl_path,
                entries=entries,
                error=e,
            )

        logger.info(f"{acl_path}: granted {[m.value for m in modes]} to {selector}")
        return ReconcileResult(
            ok=True,
            resource_path=resource_path,
            acl_path=acl_path,
            written=True,
            entries=outcome.entries,
            template_kind=outcome.template_kind,
        )
