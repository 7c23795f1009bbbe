"""
Viade POD Test Suite.

This package contains:
- unit/: Unit tests (in-memory ACL store, mocked POD client)
- integration/: HTTP client, ACL store and reconciler against a fake POD
"""
