"""Issue record validation for auditgate."""

import re
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, List, Optional, Set

from ..logging import get_logger, log_validation_event
from ..models.issues import (
    AUDIT_DOMAINS,
    EFFORT_LEVELS,
    SEVERITY_LEVELS,
    IssueRecord,
    parse_location,
)
from ..models.validations import RecordVerdict, RecordViolation, ValidationReport

logger = get_logger(__name__)

REQUIRED_FIELDS = ('issue', 'severity', 'location', 'description', 'fix')
REQUIRED_FIX_FIELDS = ('before', 'after', 'effort')
OPTIONAL_LIST_FIELDS = ('wcag', 'tags', 'commands')
KNOWN_FIELDS = frozenset(REQUIRED_FIELDS + OPTIONAL_LIST_FIELDS)

# WCAG success criterion numbers, e.g. 1.4.3 or 2.4.11
_WCAG_RE = re.compile(r"[1-4]\.\d{1,2}\.\d{1,2}")


class IssueRecordValidator:
    """Checks candidate issue records against the export schema.

    Every problem in a record is reported; a malformed record never stops
    validation of the records after it.
    """

    def __init__(
        self,
        domain: Optional[str] = None,
        strict: bool = False,
        source_root: Optional[Path] = None,
    ):
        """Initialize the validator."""
        if domain is not None and domain not in AUDIT_DOMAINS:
            raise ValueError(f"Unknown audit domain: {domain}")
        self.domain = domain
        self.strict = strict
        self.source_root = Path(source_root) if source_root is not None else None

    def validate(self, records: Iterable[Any], source: str = "<memory>") -> ValidationReport:
        """Validate a sequence of candidate records in order."""
        start_time = time.time()
        seen: Set[str] = set()
        verdicts = [
            self.validate_record(data, index=index, seen=seen)
            for index, data in enumerate(records)
        ]
        report = ValidationReport(verdicts=verdicts, domain=self.domain)

        log_validation_event(
            logger,
            source=source,
            total=len(verdicts),
            valid=report.valid_count,
            rejected=report.rejected_count,
            domain=self.domain,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return report

    def validate_record(
        self,
        data: Any,
        index: int = 0,
        seen: Optional[Set[str]] = None,
    ) -> RecordVerdict:
        """Validate one candidate record.

        ``seen`` collects issue identifiers across a run; pass the same set for
        every record of one export to enforce uniqueness.
        """
        if not isinstance(data, Mapping):
            return RecordVerdict(
                index=index,
                issue=None,
                violations=[RecordViolation(
                    field='<record>',
                    code='not_an_object',
                    message='record is not an object',
                )],
            )

        violations: List[RecordViolation] = []
        issue_id = data.get('issue') if isinstance(data.get('issue'), str) else None

        for name in REQUIRED_FIELDS:
            if name not in data:
                violations.append(_missing(name))

        for name in ('issue', 'severity', 'location', 'description'):
            if name in data:
                violations.extend(self._check_string(name, data[name]))

        if 'severity' in data and isinstance(data['severity'], str):
            if data['severity'] not in SEVERITY_LEVELS:
                violations.append(RecordViolation(
                    field='severity',
                    code='invalid_enum',
                    message='severity not in enumerated set',
                ))

        if 'fix' in data:
            violations.extend(self._check_fix(data['fix']))

        for name in OPTIONAL_LIST_FIELDS:
            if name in data:
                violations.extend(self._check_string_list(name, data[name]))

        violations.extend(self._check_domain(data))

        if self.strict:
            for name in data:
                if name not in KNOWN_FIELDS:
                    violations.append(RecordViolation(
                        field=str(name),
                        code='unknown_field',
                        message=f'unknown field: {name}',
                    ))

        if self.source_root is not None and isinstance(data.get('location'), str):
            violations.extend(self._check_location(data['location']))

        if issue_id and seen is not None and issue_id in seen:
            violations.append(RecordViolation(
                field='issue',
                code='duplicate_issue',
                message=f'duplicate issue identifier: {issue_id}',
            ))

        record = None
        if not violations:
            try:
                record = IssueRecord.from_dict(dict(data))
            except (KeyError, TypeError, ValueError) as e:
                violations.append(RecordViolation(
                    field='<record>',
                    code='wrong_type',
                    message=str(e),
                ))

        # Only a valid record claims its identifier
        if record is not None and seen is not None:
            seen.add(record.issue)

        if violations:
            logger.debug(
                "Issue record rejected",
                index=index,
                issue=issue_id,
                reasons=[v.message for v in violations],
            )

        return RecordVerdict(
            index=index,
            issue=issue_id,
            violations=violations,
            record=record,
        )

    def _check_string(self, name: str, value: Any) -> List[RecordViolation]:
        """Check that a field is a string; identifying text fields must not be blank."""
        if not isinstance(value, str):
            return [RecordViolation(
                field=name,
                code='wrong_type',
                message=f'field {name} must be a string',
            )]
        if name in ('issue', 'location', 'description') and not value.strip():
            return [RecordViolation(
                field=name,
                code='empty_value',
                message=f'empty {name}',
            )]
        return []

    def _check_fix(self, fix: Any) -> List[RecordViolation]:
        """Check the nested fix object."""
        if not isinstance(fix, Mapping):
            return [RecordViolation(
                field='fix',
                code='wrong_type',
                message='field fix must be an object',
            )]

        violations: List[RecordViolation] = []
        for name in REQUIRED_FIX_FIELDS:
            dotted = f'fix.{name}'
            if name not in fix:
                violations.append(_missing(dotted))
            elif not isinstance(fix[name], str):
                violations.append(RecordViolation(
                    field=dotted,
                    code='wrong_type',
                    message=f'field {dotted} must be a string',
                ))

        effort = fix.get('effort')
        if isinstance(effort, str) and effort not in EFFORT_LEVELS:
            violations.append(RecordViolation(
                field='fix.effort',
                code='invalid_enum',
                message='fix.effort not in enumerated set',
            ))
        return violations

    def _check_string_list(self, name: str, value: Any) -> List[RecordViolation]:
        """Check an optional list-of-strings field."""
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            return [RecordViolation(
                field=name,
                code='wrong_type',
                message=f'field {name} must be a list of strings',
            )]

        if name == 'wcag':
            return [
                RecordViolation(
                    field='wcag',
                    code='invalid_reference',
                    message=f'invalid WCAG reference: {item}',
                )
                for item in value
                if not _WCAG_RE.fullmatch(item)
            ]
        return []

    def _check_domain(self, data: Mapping) -> List[RecordViolation]:
        """Check fields that only belong to some audit domains."""
        if self.domain is None:
            return []

        violations: List[RecordViolation] = []
        if self.domain != 'accessibility' and 'wcag' in data:
            violations.append(RecordViolation(
                field='wcag',
                code='domain_mismatch',
                message='wcag is only valid for accessibility audits',
            ))
        if self.domain == 'accessibility' and 'commands' in data:
            violations.append(RecordViolation(
                field='commands',
                code='domain_mismatch',
                message='commands are only valid for security and architecture audits',
            ))
        return violations

    def _check_location(self, location: str) -> List[RecordViolation]:
        """Check that a file:line location points inside the source root."""
        path, line = parse_location(location)
        if self.source_root is None or line is None:
            # Selector, not a source position
            return []

        try:
            root = self.source_root.resolve()
            target = (self.source_root / path).resolve()
            resolves = (
                target.is_relative_to(root)
                and target.is_file()
                and line >= 1
            )
            if resolves:
                with open(target, 'r', encoding='utf-8', errors='replace') as f:
                    line_count = sum(1 for _ in f)
                resolves = line <= line_count
        except (OSError, RuntimeError, ValueError) as e:
            logger.debug("Location lookup failed", location=location[:200], error=str(e))
            resolves = False

        if resolves:
            return []
        return [RecordViolation(
            field='location',
            code='unresolved_location',
            message=f'location does not resolve: {location}',
        )]


def _missing(name: str) -> RecordViolation:
    return RecordViolation(
        field=name,
        code='missing_field',
        message=f'missing required field: {name}',
    )
