"""
ACL module for Viade - permission reconciliation on Solid PODs.

This module handles:
- Permission entries and access modes
- Querying whether a grant is already in place
- Merging a missing grant into an existing entry list
- Reading and writing ``.acl`` documents

Invariants:
    - Reconciliation is idempotent
    - ACL documents are always replaced as a whole
    - The everyone entry is never used as the target of an agent grant
"""

from .entries import ALL_MODES, AgentSelector, Mode, PermissionEntry
from .merge import MergeOutcome, TemplateKind, find_template, merge_modes
from .query import has_mode, has_modes
from .reconcile import AclReconciler, ReconcileResult
from .store import AclStore, HttpAclStore, MemoryAclStore

__all__ = [
    "ALL_MODES",
    "AgentSelector",
    "Mode",
    "PermissionEntry",
    "MergeOutcome",
    "TemplateKind",
    "find_template",
    "merge_modes",
    "has_mode",
    "has_modes",
    "AclReconciler",
    "ReconcileResult",
    "AclStore",
    "HttpAclStore",
    "MemoryAclStore",
]
