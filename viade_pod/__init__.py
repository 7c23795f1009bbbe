"""
Viade POD layer - Solid POD integration for the Viade route application.

This package provides:
- ACL reconciliation for POD resources (viade_pod.acl)
- The application permission gate (viade_pod.app_permissions)
- Route documents <-> domain objects (viade_pod.domain)
- A small async HTTP client for POD documents (viade_pod.pod)

Example:
    >>> from viade_pod import AclReconciler, HttpAclStore, PodClient
    >>>
    >>> async with PodClient() as pod:
    ...     reconciler = AclReconciler(HttpAclStore(pod), web_id)
    ...     result = await reconciler.ensure_append_for_everyone(inbox_url)
    ...     result.raise_for_error()

Invariants:
    - ACL reconciliation is idempotent
    - Store failures are never retried; they are returned unmodified in
      ReconcileResult.error and re-raised by raise_for_error()
    - No process-wide client singletons

Version: 1.0.0
"""

__version__ = "1.0.0"

from .acl import (
    AclReconciler,
    AclStore,
    AgentSelector,
    HttpAclStore,
    MemoryAclStore,
    Mode,
    PermissionEntry,
    ReconcileResult,
    has_mode,
    merge_modes,
)
from .app_permissions import (
    ErrorMessage,
    ProfileAppPermissionSource,
    check_app_permissions,
    check_permissions,
    check_specific_app_permission,
)
from .config import Settings, TemplateStrategy, get_settings
from .errors import (
    NotFoundError,
    PodConnectionError,
    PodError,
    StoreError,
    StoreWriteError,
    ValidationError,
)
from .pod import PodClient

__all__ = [
    # Version
    "__version__",
    # ACL
    "AclReconciler",
    "AclStore",
    "AgentSelector",
    "HttpAclStore",
    "MemoryAclStore",
    "Mode",
    "PermissionEntry",
    "ReconcileResult",
    "has_mode",
    "merge_modes",
    # App permissions
    "ErrorMessage",
    "ProfileAppPermissionSource",
    "check_app_permissions",
    "check_permissions",
    "check_specific_app_permission",
    # Config
    "Settings",
    "TemplateStrategy",
    "get_settings",
    # Client
    "PodClient",
    # Errors
    "PodError",
    "StoreError",
    "StoreWriteError",
    "NotFoundError",
    "PodConnectionError",
    "ValidationError",
]
