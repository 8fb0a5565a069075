from __future__ import annotations

import uvicorn

from shelter_service.config import load_settings
from shelter_service.observability import configure_logging


def main() -> None:
    settings = load_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "shelter_service.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
    )


if __name__ == "__main__":
    main()
