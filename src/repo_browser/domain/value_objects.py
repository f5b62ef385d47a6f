"""Value objects — self-validating domain primitives."""

from __future__ import annotations

from dataclasses import dataclass

from repo_browser.domain.exceptions import InvalidRevisionTokenError


@dataclass(frozen=True, slots=True)
class RevisionSpec:
    """A parsed request target.

    History is the set of commits reachable from *base*; when *topic* is set
    it is further restricted to commits not reachable from *topic*.
    """

    base: str
    topic: str | None = None

    def __post_init__(self) -> None:
        if not self.base:
            raise InvalidRevisionTokenError("Revision must not be empty.")
        if self.topic is not None and not self.topic:
            raise InvalidRevisionTokenError("Topic revision must not be empty.")

    @property
    def display(self) -> str:
        """Human-readable form, using git's range notation for topics."""
        if self.topic is None:
            return self.base
        return f"{self.topic}..{self.base}"

    @property
    def blob_name(self) -> str | None:
        """Path component of a ``rev:path`` base, if any."""
        rev, sep, path = self.base.partition(":")
        if not sep or not rev or not path:
            return None
        return path
