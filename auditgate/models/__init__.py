"""Data models for auditgate."""

from .issues import (
    AUDIT_DOMAINS,
    EFFORT_LEVELS,
    SEVERITY_LEVELS,
    AuditDomain,
    Effort,
    IssueFix,
    IssueRecord,
    Severity,
)
from .validations import RecordVerdict, RecordViolation, ValidationReport

__all__ = [
    "AUDIT_DOMAINS",
    "EFFORT_LEVELS",
    "SEVERITY_LEVELS",
    "AuditDomain",
    "Effort",
    "IssueFix",
    "IssueRecord",
    "Severity",
    "RecordVerdict",
    "RecordViolation",
    "ValidationReport",
]
