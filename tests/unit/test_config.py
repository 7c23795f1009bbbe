"""
Unit tests for settings and logging setup.
"""

import logging

import json_log_formatter
import pytest

from viade_pod.config import Settings, TemplateStrategy, get_settings
from viade_pod.logs import setup_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Defaults keep the legacy merge behaviour."""
        settings = Settings()
        assert settings.acl_suffix == ".acl"
        assert settings.template_strategy == TemplateStrategy.LEGACY_MODE_COUNT
        assert settings.dedupe_agents is False

    def test_env_override(self, monkeypatch):
        """VIADE_ prefixed variables override defaults."""
        monkeypatch.setenv("VIADE_TEMPLATE_STRATEGY", "everyone_first")
        monkeypatch.setenv("VIADE_DEDUPE_AGENTS", "true")

        settings = get_settings()

        assert settings.template_strategy == TemplateStrategy.EVERYONE_FIRST
        assert settings.dedupe_agents is True

    def test_acl_path(self):
        """ACL document lives next to the resource."""
        assert Settings().acl_path("https://a.example/inbox/") == "https://a.example/inbox/.acl"

    def test_pod_root_from_web_id(self):
        """Profile suffix is stripped from the WebID."""
        settings = Settings()
        assert settings.pod_root("https://alice.example/profile/card#me") == "https://alice.example/"
        assert settings.pod_root("https://alice.example") == "https://alice.example/"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        """Put the root logger back after each test."""
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_text_format(self):
        """Text format installs a plain formatter."""
        setup_logging(Settings(log_level="DEBUG"))
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_format(self):
        """JSON format uses json-log-formatter."""
        setup_logging(Settings(log_format="json"))
        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, json_log_formatter.JSONFormatter)
