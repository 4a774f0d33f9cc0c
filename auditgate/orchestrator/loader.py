"""Loading exported issue lists for auditgate."""

import json
import re
from pathlib import Path
from typing import Any, List, Union

from ..logging import get_logger

logger = get_logger(__name__)

# ```json ... ``` blocks in a pasted chat transcript
_FENCED_JSON_RE = re.compile(r'```(?:json|JSON)[ \t]*\r?\n(.*?)```', re.DOTALL)

# Wrapper keys an LLM may put around the issue array
_LIST_KEYS = ('issues', 'findings')


class ExportLoadError(ValueError):
    """Raised when an export cannot be turned into a list of candidates."""


def load_export(path: Union[str, Path]) -> List[Any]:
    """Read an export file and return its candidate records."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ExportLoadError(f"Cannot read {path}: {e}") from e

    candidates = parse_export(text)
    logger.info("Export loaded", path=str(path), candidates=len(candidates))
    return candidates


def parse_export(text: str) -> List[Any]:
    """Parse exported JSON, or the fenced JSON blocks of a transcript."""
    stripped = text.strip()
    if not stripped:
        raise ExportLoadError("Export is empty")

    if stripped[0] in '[{':
        try:
            return _unwrap(json.loads(stripped))
        except json.JSONDecodeError as e:
            if '```' not in stripped:
                raise ExportLoadError(f"Invalid JSON: {e}") from e

    blocks = _FENCED_JSON_RE.findall(text)
    if not blocks:
        raise ExportLoadError("No JSON found in export")

    candidates: List[Any] = []
    for number, block in enumerate(blocks, start=1):
        try:
            candidates.extend(_unwrap(json.loads(block)))
        except json.JSONDecodeError as e:
            raise ExportLoadError(f"Invalid JSON in block {number}: {e}") from e

    logger.debug("Extracted fenced JSON", blocks=len(blocks), candidates=len(candidates))
    return candidates


def _unwrap(value: Any) -> List[Any]:
    """Normalize the top-level JSON value to a list of candidates."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for key in _LIST_KEYS:
            if isinstance(value.get(key), list):
                return value[key]
        # A single record
        return [value]
    raise ExportLoadError(
        f"Expected a JSON array or object, got {type(value).__name__}"
    )
