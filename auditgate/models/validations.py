"""Validation result models for auditgate."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from dataclasses_json import DataClassJsonMixin

from .issues import SEVERITY_LEVELS, IssueRecord

# Type aliases
VerdictStatus = Literal['valid', 'rejected']
ViolationCode = Literal[
    'not_an_object',
    'missing_field',
    'wrong_type',
    'empty_value',
    'invalid_enum',
    'duplicate_issue',
    'domain_mismatch',
    'invalid_reference',
    'unknown_field',
    'unresolved_location',
]


@dataclass(slots=True)
class RecordViolation(DataClassJsonMixin):
    """One reason a candidate record was rejected."""

    field: str
    code: ViolationCode
    message: str


@dataclass(slots=True)
class RecordVerdict:
    """The outcome of validating one candidate record."""

    index: int
    issue: Optional[str]
    violations: List[RecordViolation] = field(default_factory=list)
    record: Optional[IssueRecord] = field(default=None)

    @property
    def status(self) -> VerdictStatus:
        return 'rejected' if self.violations else 'valid'

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def reasons(self) -> List[str]:
        return [violation.message for violation in self.violations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'issue': self.issue,
            'status': self.status,
            'reasons': self.reasons,
        }


@dataclass(slots=True)
class ValidationReport:
    """Aggregated verdicts for one exported issue list."""

    verdicts: List[RecordVerdict]
    domain: Optional[str] = field(default=None)

    @property
    def valid_records(self) -> List[IssueRecord]:
        """Valid records in their original order."""
        return [v.record for v in self.verdicts if v.record is not None]

    @property
    def rejected(self) -> List[RecordVerdict]:
        return [v for v in self.verdicts if not v.is_valid]

    @property
    def valid_count(self) -> int:
        return len(self.verdicts) - len(self.rejected)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    @property
    def is_valid(self) -> bool:
        """True when every record passed."""
        return not self.rejected

    def severity_counts(self) -> Dict[str, int]:
        """Count valid records per severity, in rank order."""
        counts = Counter(record.severity for record in self.valid_records)
        return {level: counts.get(level, 0) for level in SEVERITY_LEVELS}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'domain': self.domain,
            'total': len(self.verdicts),
            'valid': self.valid_count,
            'rejected': self.rejected_count,
            'severity_counts': self.severity_counts(),
            'verdicts': [verdict.to_dict() for verdict in self.verdicts],
        }
