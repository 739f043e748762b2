import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from config import STARTGG_API_URL
from service.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

TRANSIENT_STATUSES = {500, 502, 503, 504}
RETRY_DELAY = 1.0

_KEY_HINTS = {
    400: " ***start.gg API key invalid!***",
    401: " ***start.gg API key expired!***",
}


class StartGGError(RuntimeError):
    """Base class for failures talking to start.gg."""


class ConnectivityError(StartGGError):
    def __init__(self, message: str = "***You may not be connected to the internet***"):
        super().__init__(message)


class ApiError(StartGGError):
    def __init__(self, status_code: int, reason: str):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"{status_code} - {reason}.{_KEY_HINTS.get(status_code, '')}")


class RetryExhaustedError(StartGGError):
    def __init__(self, status_code: int, reason: str):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"{status_code} - {reason}")


class GraphQlError(StartGGError):
    """The request went through but the GraphQL envelope reported errors."""


def _send(session: requests.Session, method: str, url: str, **kwargs: Any) -> requests.Response:
    try:
        return session.request(method, url, **kwargs)
    except requests.exceptions.RequestException as err:
        raise ConnectivityError() from err


def wrapped_fetch(
    session: requests.Session,
    method: str,
    url: str,
    *,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> requests.Response:
    """Send one request, retrying once after RETRY_DELAY on 500/502/503/504.

    Raises ConnectivityError when the transport fails, RetryExhaustedError when
    the retry is also unsuccessful and ApiError for any other failing status.
    """
    response = _send(session, method, url, **kwargs)
    if response.ok:
        return response

    if response.status_code in TRANSIENT_STATUSES:
        logger.warning(
            "start.gg returned %s %s. Retrying once in %.1fs",
            response.status_code,
            response.reason,
            RETRY_DELAY,
        )
        sleep(RETRY_DELAY)
        retry_response = _send(session, method, url, **kwargs)
        if not retry_response.ok:
            raise RetryExhaustedError(retry_response.status_code, retry_response.reason)
        return retry_response

    raise ApiError(response.status_code, response.reason)


class StartGGService:
    """Thin GraphQL client for the start.gg API."""

    def __init__(
        self,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
        limiter: Optional[RateLimiter] = None,
        url: str = STARTGG_API_URL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not api_key:
            raise ValueError("A start.gg API key is required.")
        self._session = session or requests.Session()
        self._headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {api_key}',
        }
        self._limiter = limiter
        self._url = url
        self._sleep = sleep

    def run_query(self, query: str, variables: Optional[Dict[str, Any]] = None, *, rate_limited: bool = True) -> Dict[str, Any]:
        if self._limiter is not None and rate_limited:
            logger.debug("Queueing request behind %s pending", self._limiter.pending)
            return self._limiter.schedule(self._run_query, query, variables)
        return self._run_query(query, variables)

    def _run_query(self, query: str, variables: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        logger.debug("POST %s variables=%s", self._url, variables)
        response = wrapped_fetch(
            self._session,
            "POST",
            self._url,
            headers=self._headers,
            json={'query': query, 'variables': variables},
            sleep=self._sleep,
        )
        body = response.json()
        errors = body.get("errors")
        if errors:
            raise GraphQlError(errors[0].get("message", "Unknown GraphQL error"))
        return body.get("data")
