"""
Error-to-response mapping for the request-handling layer.

Only the status code and body are produced here; transport is the caller's
concern.
"""

import logging
from typing import Any, Dict, Tuple

from ..exceptions import DuplicateNameError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

BAD_REQUEST = (400, "BAD_REQUEST")
NOT_FOUND = (404, "NOT_FOUND")
INTERNAL_SERVER_ERROR = (500, "INTERNAL_SERVER_ERROR")


def error_response(error: Exception) -> Tuple[int, Dict[str, Any]]:
    """Translate an exception raised by the handlers into (status_code, body).

    DuplicateNameError and ValidationError become 400, NotFoundError 404,
    anything else 500 with a generic message.
    """
    if isinstance(error, DuplicateNameError):
        status = BAD_REQUEST
        message = error.message
    elif isinstance(error, ValidationError):
        status = BAD_REQUEST
        message = error.message
    elif isinstance(error, NotFoundError):
        status = NOT_FOUND
        message = error.message
    else:
        logger.error(f"Unhandled error while serving strategy request: {error!r}")
        status = INTERNAL_SERVER_ERROR
        message = "Internal server error"

    code, name = status
    body: Dict[str, Any] = {"error": message, "status": name}
    if isinstance(error, ValidationError) and error.errors:
        body["errors"] = error.errors
    return code, body
