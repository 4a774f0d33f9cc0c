"""Shared fixtures for auditgate tests."""

import copy

import pytest

from auditgate.config import reset_settings

BASE_RECORD = {
    "issue": "a1",
    "severity": "Critical",
    "location": "x.tsx:10",
    "description": "d",
    "fix": {"before": "b", "after": "a", "effort": "Low"},
}


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate tests from the developer's environment."""
    for name in ("AUDITGATE_AUDIT_DOMAIN", "AUDITGATE_STRICT_FIELDS", "AUDITGATE_SOURCE_ROOT"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_record():
    """Build a valid record dict, overriding top-level keys."""
    def _make(**overrides):
        record = copy.deepcopy(BASE_RECORD)
        record.update(overrides)
        return record
    return _make
