"""
Configuration for the Viade POD layer.

Uses pydantic-settings for environment variable loading. Every setting can be
overridden with a ``VIADE_`` prefixed variable, e.g. ``VIADE_ACL_SUFFIX``.

How to change safely:
    - Add new settings with defaults that keep existing PODs working
    - template_strategy and dedupe_agents change what gets written to
      users' ACL documents; keep the defaults unless migrating on purpose
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings


class TemplateStrategy(str, Enum):
    """How an existing ACL entry is picked as the template for a new grant."""

    LEGACY_MODE_COUNT = "legacy_mode_count"
    EVERYONE_FIRST = "everyone_first"


class Settings(BaseSettings):
    """Viade POD configuration loaded from environment."""

    # POD layout conventions
    acl_suffix: str = Field(default=".acl", description="Suffix of a resource's ACL document")
    profile_suffix: str = Field(
        default="/profile/card#me",
        description="WebID tail stripped to obtain the POD root",
    )
    routes_folder: str = Field(default="viade/routes/", description="Route container under the POD root")
    shared_folder: str = Field(default="viade/shared/", description="Shared routes container")

    # Origin the user registers as a trusted app in their profile
    app_origin: str = Field(default="https://viade.example", description="Application origin")

    # HTTP
    request_timeout: float = Field(default=30.0, description="Request timeout seconds")

    # ACL merge behaviour
    template_strategy: TemplateStrategy = Field(
        default=TemplateStrategy.LEGACY_MODE_COUNT,
        description="Template selection rule for agent grants",
    )
    dedupe_agents: bool = Field(
        default=False,
        description="Skip appending an agent already listed on the template entry",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="text or json")

    model_config = {"env_prefix": "VIADE_"}

    def acl_path(self, resource_path: str) -> str:
        """ACL document path for a resource."""
        return f"{resource_path}{self.acl_suffix}"

    def pod_root(self, web_id: str) -> str:
        """POD root URL (with trailing slash) for a WebID."""
        root = web_id
        if root.endswith(self.profile_suffix):
            root = root[: -len(self.profile_suffix)]
        return root.rstrip("/") + "/"


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
