"""Entrypoint: python -m debate_room"""
from __future__ import annotations

import uvicorn

from debate_room.config import settings
from debate_room.logging_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "debate_room.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
        log_config=None,
    )


if __name__ == "__main__":
    main()
