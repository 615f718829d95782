"""Run the relay server: python -m server"""

import logging

import uvicorn

from tycoon.settings import get_server_settings


def main() -> None:
    settings = get_server_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    uvicorn.run("server.app:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
