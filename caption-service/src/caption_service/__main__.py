"""Entry point for running the caption service."""

import logging
import uvicorn

from .config import get_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main():
    """Run the caption service."""
    settings = get_settings()

    logger.info(
        f"Starting caption service on {settings.app_host}:{settings.app_port} "
        f"(pipeline API: {settings.pipeline_api_base_url}, "
        f"max upload: {settings.max_upload_bytes} bytes)"
    )

    uvicorn.run(
        "caption_service.api.app:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
