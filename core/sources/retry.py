import logging

import requests

logger = logging.getLogger(__name__)


def is_retryable_error(exc: Exception) -> bool:
    """
    Determine if an exception is retryable.

    Only retries on:
    - Timeouts
    - Server errors (5xx)
    - Connection errors without a response

    Does NOT retry on client errors (4xx), which includes GitHub's
    403 rate-limit responses.
    """
    if isinstance(exc, requests.Timeout):
        return True

    if isinstance(exc, requests.HTTPError):
        response = getattr(exc, 'response', None)
        if response is not None:
            return response.status_code >= 500
        return True

    if isinstance(exc, requests.RequestException):
        response = getattr(exc, 'response', None)
        if response is not None and 400 <= response.status_code < 500:
            return False
        return True

    return False
