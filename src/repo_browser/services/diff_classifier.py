"""Diff line classification — purely textual, line by line."""

from __future__ import annotations

import html

from repo_browser.domain.entities import DiffLine, LineKind

COMBINED_DIFF_MARKER = "diff --cc"

_INFO_PREFIXES: tuple[str, ...] = ("diff", "index", "@@")


def is_combined(diff: str) -> bool:
    """Return True for the combined format git emits for merge commits."""
    return diff.startswith(COMBINED_DIFF_MARKER)


def classify_line(line: str, *, combined: bool = False) -> LineKind:
    """Return the presentation class of one raw diff line."""
    if line.startswith("-"):
        return LineKind.REMOVED
    if line.startswith("+"):
        return LineKind.ADDED
    if combined and line.startswith(" -"):
        return LineKind.REMOVED
    if combined and line.startswith(" +"):
        return LineKind.ADDED
    if line.startswith(_INFO_PREFIXES):
        return LineKind.INFO
    return LineKind.CONTEXT


def classify_lines(lines: list[str], *, combined: bool = False) -> list[DiffLine]:
    """Classify *lines* in order and escape them for embedding in markup."""
    return [
        DiffLine(kind=classify_line(line, combined=combined), text=html.escape(line))
        for line in lines
    ]


def classify_diff(diff: str) -> list[DiffLine]:
    """Split a whole diff into classified lines, detecting combined mode."""
    if not diff:
        return []
    return classify_lines(diff.split("\n"), combined=is_combined(diff))
