"""History paginator — one bounded log query per page, split into entries.

The backend returns a single NUL-separated stream in which each commit's
metadata record (message, then shortstat) may be followed by a record holding
its diff.  Pairing is strictly positional: a payload belongs to the metadata
record immediately before it.
"""

from __future__ import annotations

import logging
import re

from repo_browser.domain.entities import LogEntry, Page
from repo_browser.domain.exceptions import AmbiguousOrInvalidRevisionError
from repo_browser.domain.ports.repository_backend import RepositoryBackend
from repo_browser.domain.value_objects import RevisionSpec
from repo_browser.services.diff_classifier import classify_diff

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "\0"
# Start of a per-file diff header, plain or combined.
_DIFF_HEADER_RE = re.compile(r"^diff --(?:git|cc|combined) ", re.MULTILINE)

# "<subject> (<author>, <relative date>) <absolute date> <short hash>"
_TITLE_RE = re.compile(r"^(.*) \((.*), (.*)\) (.*?) (\w+)$")
# A complete " N files changed, N insertions(+), N deletions(-)" line.
_SHORTSTAT_RE = re.compile(
    r"^ \d+ files? changed(?:, \d+ insertions?\(\+\))?(?:, \d+ deletions?\(-\))?$"
)


def clamp_offset(offset: int) -> int:
    """Negative offsets are treated as the first page."""
    return max(offset, 0)


def fetch(
    backend: RepositoryBackend, spec: RevisionSpec, page: Page
) -> tuple[list[LogEntry], int]:
    """Return the log entries of *page* and how many were produced."""
    from_id = _peel_to_commit(backend, spec.base)
    if from_id is None:
        logger.debug("'%s' is not a commit; history is empty", spec.base)
        return [], 0

    exclude_id = None
    if spec.topic is not None:
        exclude_id = _peel_to_commit(backend, spec.topic)
        if exclude_id is None:
            raise AmbiguousOrInvalidRevisionError(spec.topic)

    raw = backend.query_log(from_id, exclude_id, page.offset, page.page_size)
    entries = parse_log(raw)
    return entries, len(entries)


def paginate(
    backend: RepositoryBackend, spec: RevisionSpec, offset: int, page_size: int
) -> tuple[list[LogEntry], Page]:
    """Fetch one page starting at the clamped *offset* and return the filled cursor."""
    page = Page(offset=clamp_offset(offset), page_size=page_size)
    entries, count = fetch(backend, spec, page)
    return entries, Page(offset=page.offset, page_size=page_size, count=count)


# ── Stream parsing ──────────────────────────────────────────────────────────


def split_records(raw: str) -> list[str]:
    """Split the stream on the record boundary, dropping empty records."""
    return [record for record in raw.split(RECORD_SEPARATOR) if record.strip("\n")]


def is_diff_payload(record: str) -> bool:
    """True when *record* carries a commit's shortstat and/or diff."""
    text = record.lstrip("\n")
    first_line = text.partition("\n")[0]
    return bool(_DIFF_HEADER_RE.match(text) or _SHORTSTAT_RE.match(first_line))


def parse_log(raw: str) -> list[LogEntry]:
    """Pair every metadata record with the payload immediately following it.

    With ``-z`` git may also separate the shortstat from the patch by a NUL,
    so a run of consecutive payload records belongs to one commit.  Payload
    records are never entries of their own.
    """
    records = split_records(raw)
    entries: list[LogEntry] = []

    for i, record in enumerate(records):
        if is_diff_payload(record):
            continue
        parts: list[str] = []
        for following in records[i + 1 :]:
            if not is_diff_payload(following):
                break
            parts.append(following.strip("\n"))
        entries.append(build_entry(record, "\n".join(parts)))

    return entries


def split_payload(payload: str) -> tuple[str, str]:
    """Return ``(shortstat, diff)`` from a payload record."""
    text = payload.lstrip("\n")
    if _DIFF_HEADER_RE.match(text):
        return "", text.rstrip("\n")

    stat, _, rest = text.partition("\n")
    header = _DIFF_HEADER_RE.search(rest)
    diff = rest[header.start() :] if header else ""
    return stat.strip(), diff.rstrip("\n")


def build_entry(record: str, payload: str = "") -> LogEntry:
    """Turn one metadata record (plus its optional payload) into a LogEntry."""
    title, _, body = record.lstrip("\n").partition("\n")
    stat, diff = split_payload(payload) if payload else ("", "")
    diff_lines = classify_diff(diff)
    body = body.strip("\n")

    # git prints the shortstat right after the message, before the NUL that
    # precedes the patch.
    if not stat:
        rest, _, last = body.rpartition("\n")
        if _SHORTSTAT_RE.match(last):
            stat, body = last.strip(), rest.strip("\n")

    match = _TITLE_RE.match(title)
    if match is None:
        return LogEntry(
            summary=title, body=body, stat=stat, diff=diff, diff_lines=diff_lines
        )

    subject, author, relative_date, absolute_date, short_id = match.groups()
    return LogEntry(
        summary=title,
        parsed=True,
        subject=subject,
        author=author,
        relative_date=relative_date,
        absolute_date=absolute_date,
        short_id=short_id,
        body=body,
        stat=stat,
        diff=diff,
        diff_lines=diff_lines,
    )


def _peel_to_commit(backend: RepositoryBackend, revision: str) -> str | None:
    try:
        return backend.resolve_revision(f"{revision}^{{commit}}")
    except AmbiguousOrInvalidRevisionError:
        return None
