"""Run the relay with uvicorn: ``python -m keyrelay``."""

from __future__ import annotations

import uvicorn

from keyrelay.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "keyrelay.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
