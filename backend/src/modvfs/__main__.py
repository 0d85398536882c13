"""Entry point for the standalone API process."""

import uvicorn

from modvfs.config import settings
from modvfs.main import app


def main() -> None:
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
