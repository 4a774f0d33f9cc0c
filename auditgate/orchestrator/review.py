"""Human approval step and frozen export for auditgate."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Union

from ..config import get_settings
from ..logging import get_logger, log_review_event
from ..models.issues import IssueRecord
from .validators import IssueRecordValidator

logger = get_logger(__name__)

Decision = Literal['pending', 'approved', 'rejected']
ExportOrder = Literal['original', 'severity']


class ReviewSession:
    """Tracks approve/reject decisions over a list of valid issue records.

    Records keep their original order throughout. Amendments are validated
    with the same rules as the export itself before they replace a record.
    """

    def __init__(
        self,
        records: Iterable[IssueRecord],
        validator: Optional[IssueRecordValidator] = None,
    ):
        self.validator = validator or IssueRecordValidator()
        self._records: Dict[str, IssueRecord] = {}
        self._decisions: Dict[str, Decision] = {}
        self._reasons: Dict[str, str] = {}

        for record in records:
            if record.issue in self._records:
                raise ValueError(f"Duplicate issue identifier: {record.issue}")
            self._records[record.issue] = record
            self._decisions[record.issue] = 'pending'

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> List[IssueRecord]:
        return list(self._records.values())

    def decision(self, issue_id: str) -> Decision:
        return self._decisions[self._require(issue_id)]

    def reason(self, issue_id: str) -> Optional[str]:
        return self._reasons.get(self._require(issue_id))

    @property
    def pending(self) -> List[IssueRecord]:
        return self._with_decision('pending')

    @property
    def approved(self) -> List[IssueRecord]:
        return self._with_decision('approved')

    @property
    def rejected(self) -> List[IssueRecord]:
        return self._with_decision('rejected')

    def approve(self, issue_id: str) -> None:
        """Mark a record as approved for export."""
        self._decisions[self._require(issue_id)] = 'approved'
        self._reasons.pop(issue_id, None)
        log_review_event(logger, issue=issue_id, decision='approved')

    def reject(self, issue_id: str, reason: Optional[str] = None) -> None:
        """Mark a record as rejected (e.g. a false positive)."""
        self._decisions[self._require(issue_id)] = 'rejected'
        if reason:
            self._reasons[issue_id] = reason
        log_review_event(logger, issue=issue_id, decision='rejected', reason=reason)

    def approve_all(self) -> None:
        """Approve every record that is still pending."""
        for record in self.pending:
            self.approve(record.issue)

    def amend(self, issue_id: str, **changes: Any) -> IssueRecord:
        """Replace fields of a record after re-validating the result.

        Fix fields may be given as ``before``, ``after`` and ``effort`` or as a
        complete ``fix`` mapping.
        """
        current = self._records[self._require(issue_id)]
        if 'issue' in changes and changes['issue'] != issue_id:
            raise ValueError("Issue identifier cannot be changed")

        data = current.to_dict()
        fix_changes = {
            key: changes.pop(key) for key in ('before', 'after', 'effort') if key in changes
        }
        data.update(changes)
        if fix_changes:
            data['fix'] = {**data['fix'], **fix_changes}
        for key in ('wcag', 'tags', 'commands'):
            if data.get(key) is None:
                data.pop(key, None)

        verdict = self.validator.validate_record(data)
        if verdict.record is None:
            raise ValueError(
                f"Invalid amendment for {issue_id}: {'; '.join(verdict.reasons)}"
            )

        self._records[issue_id] = verdict.record
        log_review_event(
            logger,
            issue=issue_id,
            decision='amended',
            fields=sorted(set(changes) | {f'fix.{key}' for key in fix_changes}),
        )
        return verdict.record

    def export(
        self,
        order: ExportOrder = 'original',
        include_pending: bool = True,
    ) -> Tuple[IssueRecord, ...]:
        """Freeze the approved records into an ordered, immutable sequence.

        With ``include_pending`` (the default) any undecided record is an
        error; otherwise undecided records are dropped.
        """
        if include_pending and self.pending:
            raise RuntimeError(
                f"{len(self.pending)} record(s) still pending review"
            )

        approved = self.approved
        if order == 'severity':
            approved = sorted(approved, key=lambda record: record.severity_rank)
        elif order != 'original':
            raise ValueError(f"Unknown export order: {order}")

        logger.info(
            "Review exported",
            approved=len(approved),
            rejected=len(self.rejected),
            dropped=len(self.pending),
            order=order,
        )
        return tuple(approved)

    def _with_decision(self, decision: Decision) -> List[IssueRecord]:
        return [
            record for issue_id, record in self._records.items()
            if self._decisions[issue_id] == decision
        ]

    def _require(self, issue_id: str) -> str:
        if issue_id not in self._records:
            raise KeyError(f"Unknown issue: {issue_id}")
        return issue_id


def write_export(
    path: Union[str, Path],
    records: Iterable[IssueRecord],
    indent: Optional[int] = None,
) -> int:
    """Write exported records as a JSON array; returns the record count."""
    if indent is None:
        indent = get_settings().export_indent

    payload = [record.to_dict() for record in records]
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=indent, ensure_ascii=False)
        f.write('\n')

    logger.info("Export written", path=str(path), records=len(payload))
    return len(payload)
