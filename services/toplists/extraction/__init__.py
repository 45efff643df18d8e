"""
Pivot report extraction.

Pure logic: detect the Row_/Column_/Value_ fields of a report and rank its
self-join diagonal. No I/O happens in this package.
"""

from services.toplists.extraction.keys import (
    DetectedKeys,
    DetectionStatus,
    KeyDetection,
    detect_keys,
)
from services.toplists.extraction.extractor import TOP_N, MatchEntry, extract_top_n

__all__ = [
    "DetectedKeys",
    "DetectionStatus",
    "KeyDetection",
    "detect_keys",
    "TOP_N",
    "MatchEntry",
    "extract_top_n",
]
