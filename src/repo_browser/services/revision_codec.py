"""Revision codec — embed revision strings in a single URL path segment.

A revision like ``feature/login`` cannot travel in one path segment, so every
``/`` is replaced by :data:`SEPARATOR_TOKEN`.  ``*`` is illegal both in git
ref names and in revision syntax, which keeps the mapping reversible.

A token may start with ``(topic)`` to request a range: commits reachable from
the base but not from the topic.
"""

from __future__ import annotations

from repo_browser.domain.value_objects import RevisionSpec

SEPARATOR = "/"
SEPARATOR_TOKEN = "**"

_TOPIC_OPEN = "("
_TOPIC_CLOSE = ")"


def encode(raw: str) -> str:
    """Return the URL-segment-safe token for *raw*."""
    return raw.replace(SEPARATOR, SEPARATOR_TOKEN)


def decode(token: str) -> str:
    """Inverse of :func:`encode`."""
    return token.replace(SEPARATOR_TOKEN, SEPARATOR)


def encode_spec(spec: RevisionSpec) -> str:
    """Return the compound token that :func:`parse_compound` turns back into *spec*."""
    if spec.topic is None:
        return encode(spec.base)
    return f"{_TOPIC_OPEN}{encode(spec.topic)}{_TOPIC_CLOSE}{encode(spec.base)}"


def parse_compound(token: str) -> RevisionSpec:
    """Split an optional leading ``(topic)`` off *token* and decode both parts.

    An unterminated ``(`` is not an error: the text is kept as part of the base.
    Raises ``InvalidRevisionTokenError`` when the base or a bracketed topic is
    empty.
    """
    if token.startswith(_TOPIC_OPEN):
        close = token.find(_TOPIC_CLOSE, len(_TOPIC_OPEN))
        if close != -1:
            topic = decode(token[len(_TOPIC_OPEN) : close])
            base = decode(token[close + len(_TOPIC_CLOSE) :])
            return RevisionSpec(base=base, topic=topic)

    return RevisionSpec(base=decode(token))
