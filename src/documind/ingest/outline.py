"""Heuristic outline detection over the concatenated document text.

The outline is a preview shown to the user before a chat starts. It is built
from two line classifiers:

* an explicit table-of-contents marker ("Table of Contents" or a bare
  "Index" line) after which lines ending in page numbers are collected;
* heading patterns (``Chapter 3``, ``1. Introduction``, ``IV. Results``).

Candidates from both sources are merged, de-duplicated and capped. The
15-entry table-of-contents cap counts only lines collected under a marker;
headings never use it up. When nothing is detected a fixed synthetic
outline is returned so the preview is never empty.
"""
from __future__ import annotations

import re
from typing import Callable, List, Sequence, Tuple

MAX_TOC_CANDIDATES = 15
MAX_OUTLINE_ENTRIES = 10
MIN_TOC_ENTRY_CHARS = 5
MAX_HEADING_CHARS = 100

FALLBACK_OUTLINE: Tuple[str, ...] = (
    "1. Executive Summary (Detected)",
    "2. Introduction (Detected)",
    "3. Methodology (Detected)",
    "4. Analysis (Detected)",
    "5. Conclusion (Detected)",
)

_CHAPTER_RE = re.compile(r"^(chapter|section)\s+\d+", re.IGNORECASE)
_NUMBERED_RE = re.compile(r"^\d+\.\s+[A-Z]")
_ROMAN_RE = re.compile(r"^[IVX]+\.\s+[A-Z]")
_TRAILING_DIGITS_RE = re.compile(r"\d+$")

LineClassifier = Callable[[str], bool]


def is_toc_marker(line: str) -> bool:
    lowered = line.lower()
    return lowered == "index" or "table of contents" in lowered


def is_toc_entry(line: str) -> bool:
    return len(line) > MIN_TOC_ENTRY_CHARS and bool(_TRAILING_DIGITS_RE.search(line))


def is_chapter_heading(line: str) -> bool:
    return bool(_CHAPTER_RE.match(line))


def is_numbered_heading(line: str) -> bool:
    return bool(_NUMBERED_RE.match(line))


def is_roman_heading(line: str) -> bool:
    return bool(_ROMAN_RE.match(line))


HEADING_CLASSIFIERS: Sequence[LineClassifier] = (
    is_chapter_heading,
    is_numbered_heading,
    is_roman_heading,
)


def is_heading(line: str) -> bool:
    """Return True when any heading classifier accepts a short enough line."""

    if len(line) >= MAX_HEADING_CHARS:
        return False
    return any(classifier(line) for classifier in HEADING_CLASSIFIERS)


def _dedupe(candidates: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(candidates))


def extract_outline(full_text: str) -> List[str]:
    """Return between 1 and 10 distinct outline entries for ``full_text``."""

    candidates: List[str] = []
    toc_mode = False
    toc_collected = 0

    for raw_line in full_text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if is_toc_marker(line):
            toc_mode = True
            continue

        if toc_mode and toc_collected < MAX_TOC_CANDIDATES and is_toc_entry(line):
            candidates.append(line)
            toc_collected += 1
            continue

        if is_heading(line):
            candidates.append(line)

    outline = _dedupe(candidates)[:MAX_OUTLINE_ENTRIES]
    if not outline:
        return list(FALLBACK_OUTLINE)
    return outline
