"""Parsing of the string-encoded fields delivered by the ingestion layer.

Every raw field is parsed exactly once, when a record is built, and the
result is carried as a ``FieldParse`` so analyzers never re-parse or re-raise.
"""

from __future__ import annotations

import json
import re
from typing import Any, NamedTuple, Optional, Tuple

RANGE_PATTERN = re.compile(r"^(\d+)-(\d+)$")
# Phases above this are rejected before any range is materialized
MAX_PHASE = 1000


class FieldParse(NamedTuple):
    """Outcome of parsing one raw field: the parsed value or an error message."""

    raw: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def present(self) -> bool:
        return bool(self.raw.strip())


def as_text(value: Any) -> str:
    """Normalize a cell value to a string (None and NaN become empty)."""
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value)


def as_int(value: Any) -> int:
    """Coerce a cell value to int the way the uploader does; failures become 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value)
    match = re.match(r"^\s*([+-]?\d+)", as_text(value))
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # beyond the interpreter's int-from-str digit limit
        return 0


def split_list(raw: str) -> Tuple[str, ...]:
    """Split a comma-delimited field, trimming tokens and dropping empty ones."""
    if not raw:
        return ()
    return tuple(token.strip() for token in raw.split(",") if token.strip())


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


def loads_strict(raw: str) -> Any:
    return json.loads(raw, parse_constant=_reject_constant)


def parse_json_blob(raw: str) -> FieldParse:
    """Parse a free-form JSON blob; an empty field is valid and yields None."""
    raw = as_text(raw)
    if not raw.strip():
        return FieldParse(raw)
    try:
        return FieldParse(raw, loads_strict(raw))
    except ValueError:
        return FieldParse(raw, error="Invalid JSON")


def _positive_int(item: Any) -> Optional[int]:
    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        return item if 0 < item <= MAX_PHASE else None
    if isinstance(item, float) and item.is_integer() and 0 < item <= MAX_PHASE:
        return int(item)
    return None


def parse_phase_array(raw: str) -> FieldParse:
    """Parse a JSON array of phases in ``1..MAX_PHASE`` into a sorted tuple."""
    raw = as_text(raw)
    try:
        parsed = loads_strict(raw)
    except ValueError:
        return FieldParse(raw, error="Invalid JSON")
    if not isinstance(parsed, list):
        return FieldParse(raw, error="must be an array")
    phases = []
    for item in parsed:
        phase = _positive_int(item)
        if phase is None:
            return FieldParse(raw, error=f"must contain integers between 1 and {MAX_PHASE}, got {item!r}")
        phases.append(phase)
    return FieldParse(raw, tuple(sorted(set(phases))))


def expand_range(raw: str) -> Optional[Tuple[int, ...]]:
    """
    Expand ``"start-end"`` into its inclusive phase tuple, or None if not a range.

    Raises:
        ValueError: If either bound is above MAX_PHASE
    """
    match = RANGE_PATTERN.match(raw.strip())
    if not match:
        return None
    start_text, end_text = match.groups()
    # compare digit counts first, int() refuses very long digit strings
    for bound in (start_text, end_text):
        if len(bound.lstrip("0")) > len(str(MAX_PHASE)) or int(bound) > MAX_PHASE:
            raise ValueError(f"phase range exceeds {MAX_PHASE}")
    return tuple(range(int(start_text), int(end_text) + 1))


def parse_phase_spec(raw: str) -> FieldParse:
    """Parse a preferred-phase field: a JSON phase array or a textual range."""
    raw = as_text(raw)
    try:
        expanded = expand_range(raw)
    except ValueError as e:
        return FieldParse(raw, error=str(e))
    if expanded is not None:
        return FieldParse(raw, expanded)
    parsed = parse_phase_array(raw)
    if parsed.ok:
        return parsed
    return FieldParse(raw, error="must be a JSON array of positive integers or a range like '1-3'")


def coerce_phase_list(value: Any) -> Optional[Tuple[int, ...]]:
    """Normalize a rule's phase list (list, JSON text or range) to a tuple of phases."""
    if isinstance(value, (list, tuple)):
        phases = [_positive_int(item) for item in value]
        if any(phase is None for phase in phases):
            return None
        return tuple(sorted(set(phases)))
    parsed = parse_phase_spec(as_text(value))
    return parsed.value if parsed.ok else None
