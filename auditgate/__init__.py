"""
auditgate: checks LLM audit findings before they reach an implementation agent

An accessibility, security or architecture audit run in an LLM chat ends with
a JSON list of issue records. auditgate:
- Loads the export (plain JSON or the fenced JSON blocks of a transcript)
- Validates every record against the issue schema, reporting all violations
- Lets a human approve, reject or amend each finding
- Writes the approved findings as a frozen, ordered JSON list

Usage:
    from auditgate import IssueRecordValidator, load_export

    report = IssueRecordValidator(domain="security").validate(load_export("issues.json"))

    # Or use CLI:
    $ auditgate validate issues.json --domain security
"""

__version__ = "0.1.0"

# Core functionality
from .config import get_settings
from .logging import get_logger

from .models.issues import IssueFix, IssueRecord
from .models.validations import ValidationReport
from .orchestrator.loader import ExportLoadError, load_export, parse_export
from .orchestrator.review import ReviewSession, write_export
from .orchestrator.validators import IssueRecordValidator

__all__ = [
    "ExportLoadError",
    "IssueFix",
    "IssueRecord",
    "IssueRecordValidator",
    "ReviewSession",
    "ValidationReport",
    "get_logger",
    "get_settings",
    "load_export",
    "parse_export",
    "write_export",
    "__version__",
]
