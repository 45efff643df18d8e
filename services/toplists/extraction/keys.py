"""
Field-name detection for generic pivot reports.

Pivot reports do not have a fixed schema. The host names the three
interesting fields with a prefix convention:

  Row_*     -> row-axis label
  Column_*  -> column-axis label
  Value_*   -> numeric cell value

Only the first row is inspected. All rows of one report share the same
field set, so the sample is representative.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

ROW_PREFIX = "Row_"
COLUMN_PREFIX = "Column_"
VALUE_PREFIX = "Value_"

PivotRow = Mapping[str, Any]


@dataclass(frozen=True)
class DetectedKeys:
    row_key: str
    column_key: str
    value_key: str


class DetectionStatus(str, enum.Enum):
    DETECTED = "detected"
    EMPTY = "empty"
    UNDETECTABLE = "undetectable"


@dataclass(frozen=True)
class KeyDetection:
    """
    Result of inspecting a pivot report.

    Attributes:
        status: which variant this is.
        keys:   set only when status is DETECTED.
        sample: the first row, kept for diagnostics when status is UNDETECTABLE.
    """

    status: DetectionStatus
    keys: DetectedKeys | None = None
    sample: PivotRow | None = None

    @property
    def detected(self) -> bool:
        return self.status is DetectionStatus.DETECTED

    @classmethod
    def empty(cls) -> "KeyDetection":
        return cls(status=DetectionStatus.EMPTY)

    @classmethod
    def undetectable(cls, sample: PivotRow) -> "KeyDetection":
        return cls(status=DetectionStatus.UNDETECTABLE, sample=sample)

    @classmethod
    def found(cls, keys: DetectedKeys) -> "KeyDetection":
        return cls(status=DetectionStatus.DETECTED, keys=keys)


def _first_with_prefix(field_names: Sequence[str], prefix: str) -> str | None:
    for name in field_names:
        if name.startswith(prefix):
            return name
    return None


def detect_keys(rows: Sequence[PivotRow]) -> KeyDetection:
    """Pick the first Row_/Column_/Value_ field of the first row, in field order."""
    if not rows:
        return KeyDetection.empty()

    sample = rows[0]
    field_names = [str(name) for name in sample.keys()]

    row_key = _first_with_prefix(field_names, ROW_PREFIX)
    column_key = _first_with_prefix(field_names, COLUMN_PREFIX)
    value_key = _first_with_prefix(field_names, VALUE_PREFIX)

    if row_key is None or column_key is None or value_key is None:
        return KeyDetection.undetectable(sample)

    return KeyDetection.found(DetectedKeys(row_key, column_key, value_key))
