"""Issue record data models for auditgate."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from dataclasses_json import DataClassJsonMixin

# Type aliases for better type safety
Severity = Literal['Critical', 'Serious', 'Moderate', 'Minor']
Effort = Literal['Low', 'Medium', 'High']
AuditDomain = Literal['accessibility', 'security', 'architecture']

# Rank order: most severe first, cheapest first
SEVERITY_LEVELS: Tuple[str, ...] = ('Critical', 'Serious', 'Moderate', 'Minor')
EFFORT_LEVELS: Tuple[str, ...] = ('Low', 'Medium', 'High')
AUDIT_DOMAINS: Tuple[str, ...] = ('accessibility', 'security', 'architecture')

# file:line or file:start-end
_LOCATION_RE = re.compile(r"(?P<path>.+?):(?P<line>\d{1,9})(?:-\d{1,9})?")


@dataclass(slots=True)
class IssueFix(DataClassJsonMixin):
    """The suggested remediation attached to an issue."""

    before: str
    after: str
    effort: Effort

    def __post_init__(self) -> None:
        if self.effort not in EFFORT_LEVELS:
            raise ValueError(f"Invalid fix effort: {self.effort}")

    def to_dict(self, encode_json: bool = False) -> Dict[str, Any]:
        return {
            'before': self.before,
            'after': self.after,
            'effort': self.effort,
        }


@dataclass(slots=True)
class IssueRecord(DataClassJsonMixin):
    """A single audit finding as exported at the end of an audit conversation."""

    issue: str
    severity: Severity
    location: str
    description: str
    fix: IssueFix
    wcag: Optional[List[str]] = field(default=None)
    tags: Optional[List[str]] = field(default=None)
    commands: Optional[List[str]] = field(default=None)

    def __post_init__(self) -> None:
        """Validate issue data after initialization."""
        if not self.issue or not self.issue.strip():
            raise ValueError("Issue identifier cannot be empty")
        if not self.location or not self.location.strip():
            raise ValueError("Location cannot be empty")
        if not self.description or not self.description.strip():
            raise ValueError("Description cannot be empty")
        if self.severity not in SEVERITY_LEVELS:
            raise ValueError(f"Invalid severity: {self.severity}")

    def to_dict(self, encode_json: bool = False) -> Dict[str, Any]:
        """Convert the record to its exported JSON shape."""
        data: Dict[str, Any] = {'issue': self.issue}
        if self.wcag is not None:
            data['wcag'] = list(self.wcag)
        if self.tags is not None:
            data['tags'] = list(self.tags)
        data.update({
            'severity': self.severity,
            'location': self.location,
            'description': self.description,
            'fix': self.fix.to_dict(),
        })
        if self.commands is not None:
            data['commands'] = list(self.commands)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, infer_missing: bool = False) -> IssueRecord:
        """Create an issue record from its exported JSON shape."""
        fix = data['fix']
        if not isinstance(fix, IssueFix):
            fix = IssueFix(
                before=fix['before'],
                after=fix['after'],
                effort=fix['effort'],
            )

        return cls(
            issue=data['issue'],
            severity=data['severity'],
            location=data['location'],
            description=data['description'],
            fix=fix,
            wcag=data.get('wcag'),
            tags=data.get('tags'),
            commands=data.get('commands'),
        )

    @property
    def severity_rank(self) -> int:
        """Position in SEVERITY_LEVELS; 0 is Critical."""
        return SEVERITY_LEVELS.index(self.severity)

    @property
    def is_critical(self) -> bool:
        """Check if the issue is critical severity."""
        return self.severity == 'Critical'

    @property
    def location_parts(self) -> Tuple[str, Optional[int]]:
        """Split a file:line location into path and line number.

        Locations without a numeric suffix are treated as selectors and come
        back unchanged with no line.
        """
        return parse_location(self.location)


def parse_location(location: str) -> Tuple[str, Optional[int]]:
    """Split ``file:line`` (or ``file:start-end``) into ``(path, line)``."""
    match = _LOCATION_RE.fullmatch(location.strip())
    if match is None:
        return location, None
    return match.group('path'), int(match.group('line'))
