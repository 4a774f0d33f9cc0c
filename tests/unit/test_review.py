"""Unit tests for the review session and export."""

import json

import pytest

from auditgate.models.issues import IssueRecord
from auditgate.orchestrator.review import ReviewSession, write_export
from auditgate.orchestrator.validators import IssueRecordValidator


@pytest.fixture
def records(make_record):
    return [
        IssueRecord.from_dict(make_record(issue="minor-1", severity="Minor")),
        IssueRecord.from_dict(make_record(issue="crit-1", severity="Critical")),
        IssueRecord.from_dict(make_record(issue="mod-1", severity="Moderate")),
        IssueRecord.from_dict(make_record(issue="crit-2", severity="Critical")),
    ]


class TestReviewSession:
    """Test cases for ReviewSession."""

    def test_starts_pending(self, records):
        session = ReviewSession(records)

        assert len(session) == 4
        assert [r.issue for r in session.pending] == ["minor-1", "crit-1", "mod-1", "crit-2"]
        assert session.decision("crit-1") == "pending"

    def test_approve_and_reject(self, records):
        session = ReviewSession(records)

        session.approve("crit-1")
        session.reject("minor-1", "false positive: decorative image")

        assert session.decision("crit-1") == "approved"
        assert [r.issue for r in session.rejected] == ["minor-1"]
        assert session.reason("minor-1") == "false positive: decorative image"
        assert len(session.pending) == 2

    def test_unknown_issue(self, records):
        session = ReviewSession(records)

        with pytest.raises(KeyError, match="Unknown issue: nope"):
            session.approve("nope")

    def test_duplicate_records(self, records):
        with pytest.raises(ValueError, match="Duplicate issue identifier"):
            ReviewSession(records + records[:1])

    def test_export_preserves_original_order(self, records):
        session = ReviewSession(records)
        session.approve_all()
        session.reject("mod-1")

        exported = session.export()

        assert isinstance(exported, tuple)
        assert [r.issue for r in exported] == ["minor-1", "crit-1", "crit-2"]

    def test_export_by_severity_is_stable(self, records):
        session = ReviewSession(records)
        session.approve_all()

        exported = session.export(order="severity")

        assert [r.issue for r in exported] == ["crit-1", "crit-2", "mod-1", "minor-1"]

    def test_export_with_pending(self, records):
        session = ReviewSession(records)
        session.approve("crit-2")

        with pytest.raises(RuntimeError, match="3 record"):
            session.export()
        assert [r.issue for r in session.export(include_pending=False)] == ["crit-2"]

    def test_amend_severity(self, records):
        session = ReviewSession(records)

        amended = session.amend("crit-1", severity="Serious")

        assert amended.severity == "Serious"
        assert session.records[1].severity == "Serious"
        assert session.decision("crit-1") == "pending"

    def test_amend_fix_fields(self, records):
        session = ReviewSession(records)

        amended = session.amend("mod-1", effort="High", after="better code")

        assert amended.fix.effort == "High"
        assert amended.fix.after == "better code"
        assert amended.fix.before == "b"

    def test_invalid_amendment_keeps_record(self, records):
        session = ReviewSession(records)

        with pytest.raises(ValueError, match="severity not in enumerated set"):
            session.amend("crit-1", severity="Blocker")
        assert session.records[1].severity == "Critical"

    def test_amend_uses_session_domain(self, records):
        session = ReviewSession(records, validator=IssueRecordValidator(domain="security"))

        with pytest.raises(ValueError, match="wcag is only valid for accessibility audits"):
            session.amend("crit-1", wcag=["1.1.1"])

    def test_issue_identifier_is_fixed(self, records):
        session = ReviewSession(records)

        with pytest.raises(ValueError, match="cannot be changed"):
            session.amend("crit-1", issue="crit-9")


class TestWriteExport:
    """Test cases for writing the final JSON list."""

    def test_write_export(self, tmp_path, records, make_record):
        path = tmp_path / "approved.json"

        count = write_export(path, records[:2])

        assert count == 2
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0] == make_record(issue="minor-1", severity="Minor")
        assert data[1]["issue"] == "crit-1"
