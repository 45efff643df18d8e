"""
Self-join top-N extraction over a pivot report.

A pivot report cross-tabulates row labels against column labels. Rows whose
row label equals their column label sit on the diagonal and carry the
matched total for that label; every other row is a cross combination and
is ignored here.

Flow:
  1. Skip rows with a null row or column label
  2. Keep rows where str(row label) == str(column label)
  3. Coerce the value field to a number (bad or missing -> 0, never dropped)
  4. Stable sort by value descending, keep the first TOP_N

Labels are compared in the host platform's string form, so a numeric
label 10 (or 10.0) and the string "10" are the same label.

Pure functions only: no I/O, no logging of row data.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Sequence

from services.toplists.extraction.keys import DetectedKeys, PivotRow

# Number of named output slots per dataset kind
TOP_N = 5

# Numeric strings the host accepts: decimal with optional exponent,
# signed Infinity, and unsigned 0x/0o/0b integers
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INFINITY_RE = re.compile(r"^([+-]?)Infinity$")
_RADIX_RE = re.compile(r"^0([xXoObB])([0-9a-fA-F]+)$")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


@dataclass(frozen=True)
class MatchEntry:
    label: str
    value: float


def _format_number(number: float) -> str:
    """Number-to-string in the host's shortest round-trip form.

    Plain notation for 1e-6 <= |x| < 1e21, exponent form ("1e+21",
    "1.5e-7") outside that range.
    """
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    text = repr(abs(number))
    mantissa, _, exponent = text.partition("e")
    point = mantissa.find(".")
    if point < 0:
        point = len(mantissa)
    digits = mantissa.replace(".", "")
    # value == 0.<digits> * 10**n
    n = point + int(exponent or 0)
    stripped = digits.lstrip("0")
    n -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    k = len(digits)

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits

    e = n - 1
    exp_text = f"e{'+' if e >= 0 else '-'}{abs(e)}"
    if k == 1:
        return sign + digits + exp_text
    return sign + digits[0] + "." + digits[1:] + exp_text


def stringify_label(raw: Any) -> str:
    """Render a label the way the host platform stringifies it.

    10.0 -> "10", True -> "true", 1e21 -> "1e+21", "X" -> "X".
    """
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, int) and abs(raw) < 10**21:
        return str(raw)
    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError:
            number = math.inf if raw > 0 else -math.inf
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        return _format_number(number)
    return str(raw)


def _parse_number_text(text: str) -> float:
    """Parse a trimmed numeric string with the host's rules. NaN when invalid."""
    if not text:
        return 0.0
    if _DECIMAL_RE.match(text):
        return float(text)
    match = _INFINITY_RE.match(text)
    if match:
        return -math.inf if match.group(1) == "-" else math.inf
    match = _RADIX_RE.match(text)
    if match:
        base = _RADIX_BASES[match.group(1).lower()]
        try:
            return float(int(match.group(2), base))
        except ValueError:
            return math.nan
    return math.nan


def coerce_value(raw: Any) -> float:
    """Convert a pivot cell to a number. Anything unparseable becomes 0.0."""
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError:
            number = math.inf if raw > 0 else -math.inf
    elif isinstance(raw, str):
        number = _parse_number_text(raw.strip())
    else:
        return 0.0

    if math.isnan(number):
        return 0.0
    return number


def find_matches(rows: Sequence[PivotRow], keys: DetectedKeys) -> list[MatchEntry]:
    """Return diagonal rows in scan order."""
    matches: list[MatchEntry] = []

    for row in rows:
        row_label = row.get(keys.row_key)
        column_label = row.get(keys.column_key)
        if row_label is None or column_label is None:
            continue

        label = stringify_label(row_label)
        if label != stringify_label(column_label):
            continue

        matches.append(MatchEntry(label=label, value=coerce_value(row.get(keys.value_key))))

    return matches


def rank_matches(matches: Sequence[MatchEntry], limit: int = TOP_N) -> list[MatchEntry]:
    """Sort by value descending and cut to `limit`. Ties keep scan order."""
    # sorted() is stable, so equal values stay in scan order
    return sorted(matches, key=lambda m: m.value, reverse=True)[:limit]


def extract_top_n(
    rows: Sequence[PivotRow],
    keys: DetectedKeys,
    limit: int = TOP_N,
) -> list[MatchEntry]:
    """
    Rank the self-join diagonal of a pivot report.

    Args:
        rows:  full pivot report rows.
        keys:  detected row/column/value field names for this report.
        limit: maximum entries to return.

    Returns:
        Up to `limit` entries, highest value first. An empty list means no
        row matched; the caller clears the slots in that case.
    """
    return rank_matches(find_matches(rows, keys), limit)
