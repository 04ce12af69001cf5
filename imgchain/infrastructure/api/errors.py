from __future__ import annotations

import logging

from fastapi import HTTPException, status

from imgchain.domain.errors import (
    CapabilityUnavailableError,
    DecodeFailureError,
    InvalidParameterError,
    SessionNotFoundError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)


def to_http_error(exc: Exception) -> HTTPException:
    """Map a domain failure to the HTTP status the API documents."""
    if isinstance(exc, SessionNotFoundError):
        code, detail = status.HTTP_404_NOT_FOUND, str(exc)
    elif isinstance(exc, (UnsupportedOperationError, InvalidParameterError, DecodeFailureError)):
        code, detail = status.HTTP_400_BAD_REQUEST, str(exc)
    elif isinstance(exc, CapabilityUnavailableError):
        code, detail = status.HTTP_503_SERVICE_UNAVAILABLE, str(exc)
    else:
        code, detail = status.HTTP_500_INTERNAL_SERVER_ERROR, f"Processing failed: {exc}"
    logger.warning("Request rejected (%d): %s", code, detail)
    return HTTPException(status_code=code, detail=detail)
