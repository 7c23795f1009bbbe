"""
ACL store clients.

This module defines the AclStore protocol the reconciler talks to, plus two
implementations:
- HttpAclStore: reads and writes ``<resource>.acl`` on a Solid POD
- MemoryAclStore: in-memory store for tests and local development

Invariants:
    - get_permissions returns a fresh list on every call
    - A missing ACL document reads as an empty list
    - create_acl replaces the whole document; there is no partial update
    - HttpAclStore.create_acl keeps authorizations it cannot decode
      (agentGroup, other agent classes, origin-restricted grants)
    - I/O failures raise StoreError and are not retried here

How to change safely:
    - Protocol changes require updating both implementations
    - Optimistic concurrency (ETag / If-Match) belongs here, not in the
      reconciler
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from ..errors import NotFoundError, StoreError, StoreWriteError
from ..pod import PodClient
from .document import decode_acl, encode_acl, preserved_nodes
from .entries import PermissionEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class AclStore(Protocol):
    """Protocol every ACL store must implement."""

    async def get_permissions(
        self,
        web_id: str,
        resource_path: str,
        acl_path: str,
    ) -> List[PermissionEntry]:
        """Fetch the current entries of a resource's ACL document."""
        ...

    async def create_acl(
        self,
        web_id: str,
        resource_path: str,
        acl_path: str,
        permissions: Sequence[PermissionEntry],
    ) -> None:
        """Replace a resource's ACL document with the given entries."""
        ...


class HttpAclStore:
    """ACL store backed by a Solid POD over HTTP.

    Example:
        >>> async with PodClient(settings) as pod:
        ...     store = HttpAclStore(pod)
        ...     entries = await store.get_permissions(web_id, path, f"{path}.acl")
    """

    def __init__(self, pod: PodClient) -> None:
        self._pod = pod

    async def get_permissions(
        self,
        web_id: str,
        resource_path: str,
        acl_path: str,
    ) -> List[PermissionEntry]:
        try:
            document = await self._pod.retrieve_json(acl_path)
        except NotFoundError:
            logger.debug(f"No ACL document at {acl_path}")
            return []
        return decode_acl(document)

    async def create_acl(
        self,
        web_id: str,
        resource_path: str,
        acl_path: str,
        permissions: Sequence[PermissionEntry],
    ) -> None:
        try:
            current = await self._pod.retrieve_json(acl_path)
        except NotFoundError:
            current = None
        preserved = preserved_nodes(current)

        document = encode_acl(web_id, resource_path, permissions, preserved)
        await self._pod.store_json(acl_path, document)
        logger.info(
            f"Wrote {len(permissions)} ACL entries to {acl_path}"
            f" ({len(preserved)} authorizations kept as-is)"
        )


class MemoryAclStore:
    """In-memory implementation of AclStore for testing.

    Stores one entry list per ACL path and records every write.

    Attributes:
        writes: (acl_path, entries) pairs, in write order
        fail_reads: Error raised by get_permissions when set
        fail_writes: Error raised by create_acl when set

    Thread safety:
        Uses an asyncio lock. Safe to use from multiple coroutines, but the
        lock does not make a read-modify-write sequence atomic.
    """

    def __init__(
        self,
        initial: Optional[Dict[str, Sequence[PermissionEntry]]] = None,
    ) -> None:
        self._acls: Dict[str, List[PermissionEntry]] = {
            path: [e.copy() for e in entries] for path, entries in (initial or {}).items()
        }
        self.writes: List[tuple[str, List[PermissionEntry]]] = []
        self.fail_reads: Optional[StoreError] = None
        self.fail_writes: Optional[StoreError] = None
        self._lock = asyncio.Lock()

    def entries(self, acl_path: str) -> List[PermissionEntry]:
        """Current entries stored at acl_path (copy)."""
        return [e.copy() for e in self._acls.get(acl_path, [])]

    async def get_permissions(
        self,
        web_id: str,
        resource_path: str,
        acl_path: str,
    ) -> List[PermissionEntry]:
        async with self._lock:
            if self.fail_reads is not None:
                raise self.fail_reads
            return self.entries(acl_path)

    async def create_acl(
        self,
        web_id: str,
        resource_path: str,
        acl_path: str,
        permissions: Sequence[PermissionEntry],
    ) -> None:
        async with self._lock:
            if self.fail_writes is not None:
                raise self.fail_writes
            stored = [e.copy() for e in permissions]
            self._acls[acl_path] = stored
            self.writes.append((acl_path, [e.copy() for e in stored]))

    def fail_next_writes(self, message: str = "Write rejected") -> None:
        """Make subsequent writes raise StoreWriteError."""
        self.fail_writes = StoreWriteError(message)
