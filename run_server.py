import os

import uvicorn

from ocean_status.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def log_provider_modes() -> None:
    """Say up front whether each provider will call upstream or serve mock data."""
    if not settings.openweather_api_key:
        logger.warning("OPENWEATHER_API_KEY not set; weather will be synthesized")
    if not settings.worldtides_api_key:
        logger.warning("WORLDTIDES_API_KEY not set; tides will be synthesized")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="ocean_status")
    log_provider_modes()

    uvicorn.run(
        "ocean_status.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
