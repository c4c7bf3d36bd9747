"""Error kinds raised by the matching core and how the API renders them."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MatchingError(Exception):
    """Base class for every error surfaced to API callers."""
    kind = "MatchingError"
    status_code = 500


class InvalidQuery(MatchingError):
    """Empty search skill, or "find all" with no learn skills declared."""
    kind = "InvalidQuery"
    status_code = 400


class ProfileNotFound(MatchingError):
    """The requester id does not resolve in the profile store."""
    kind = "ProfileNotFound"
    status_code = 404


class StoreUnavailable(MatchingError):
    """The profile store could not be reached or failed mid-query."""
    kind = "StoreUnavailable"
    status_code = 503


class Unauthorized(MatchingError):
    """Missing, malformed, forged or expired bearer token."""
    kind = "Unauthorized"
    status_code = 401


async def matching_error_handler(request: Request, exc: MatchingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} in {request.url.path}: {exc}", exc_info=exc)
    else:
        logger.info(f"{exc.kind} in {request.url.path}: {exc}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": exc.kind, "detail": str(exc)},
    )
