"""Serve the API with uvicorn: ``python -m multisite_abilities.server``."""

import uvicorn

from multisite_abilities.core.config import settings


def main() -> None:
    uvicorn.run(
        "multisite_abilities.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
