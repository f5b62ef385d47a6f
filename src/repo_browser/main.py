"""Console entry point: ``repo-browser`` serves every repository in ``REPOSITORIES``."""

from __future__ import annotations
import logging
import uvicorn
from repo_browser.infrastructure.config import get_settings

def main() -> None:
    """Configure logging and start the uvicorn ASGI server."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    logging.getLogger(__name__).info(
        "Serving %d repositories on %s:%d",
        len(settings.repositories),
        settings.host,
        settings.port,
    )
    uvicorn.run(
        "repo_browser.interface.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
