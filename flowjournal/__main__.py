"""Run the API with uvicorn: ``python -m flowjournal``."""

import uvicorn

from .infrastructure.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "flowjournal.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_config=None,  # Use structlog instead
    )


if __name__ == "__main__":
    main()
