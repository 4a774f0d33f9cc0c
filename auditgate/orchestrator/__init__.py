"""Loading, validation and review of exported audit issues."""

from .loader import ExportLoadError, load_export, parse_export
from .review import ReviewSession, write_export
from .validators import IssueRecordValidator

__all__ = [
    "ExportLoadError",
    "IssueRecordValidator",
    "ReviewSession",
    "load_export",
    "parse_export",
    "write_export",
]
