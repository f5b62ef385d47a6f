"""Repository registry — every configured repository, opened once at startup."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType

from repo_browser.domain.entities import Repository
from repo_browser.domain.exceptions import RepositoryNotFoundError
from repo_browser.domain.ports.repository_backend import RepositoryBackend
from repo_browser.infrastructure.git_backend import GitPythonBackend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str], RepositoryBackend]


class RepositoryRegistry(Mapping[str, Repository]):
    """Immutable name → :class:`Repository` mapping shared by all requests."""

    def __init__(self, repositories: Mapping[str, Repository]) -> None:
        self._repositories = MappingProxyType(dict(repositories))

    @classmethod
    def open(
        cls,
        paths: Mapping[str, str],
        backend_factory: BackendFactory = GitPythonBackend,
    ) -> RepositoryRegistry:
        """Open each configured repository; fails fast on an unusable path."""
        repositories: dict[str, Repository] = {}
        for name, location in paths.items():
            path = os.path.abspath(os.path.expanduser(location))
            backend = backend_factory(path)
            repositories[name] = Repository(
                name=name,
                path=path,
                backend=backend,
                description=backend.read_description(),
            )
            logger.info("Opened repository %s at %s", name, path)
        return cls(repositories)

    def get_repository(self, name: str) -> Repository:
        try:
            return self._repositories[name]
        except KeyError:
            raise RepositoryNotFoundError(f"Unknown repository: '{name}'.") from None

    def __getitem__(self, name: str) -> Repository:
        return self._repositories[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._repositories))

    def __len__(self) -> int:
        return len(self._repositories)
