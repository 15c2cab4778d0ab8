import logging
from typing import cast

from fastapi import Request
from src.fleet_manager.config import get_settings
from src.fleet_manager.middleware.exceptions import (
    InvalidAPIKeyError,
    MissingAPIKeyError,
)

logger = logging.getLogger(__name__)


async def validate_api_key(request: Request) -> str:
    """Dependency that validates the API key header on incoming requests."""
    settings = get_settings()
    api_key = request.headers.get(settings.FASTAPI_API_KEY_HEADER)
    if not api_key:
        logger.warning("Missing API key in request to %s", request.url.path)
        raise MissingAPIKeyError
    if api_key != settings.FASTAPI_API_KEY:
        logger.warning("Invalid API key for request to %s", request.url.path)
        raise InvalidAPIKeyError(api_key)
    logger.debug("API key validated successfully")
    return cast(str, api_key)
