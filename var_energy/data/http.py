"""Shared HTTP request handling for the price sources.

Maps requests exceptions onto the source error taxonomy. No retries: a failed
request surfaces to the user, who re-triggers it by selecting the date again.
"""

from loguru import logger
import requests

from var_energy.config import REQUEST_TIMEOUT
from var_energy.data.errors import SourceUnavailable, TransportError


def get(
    url: str,
    params: dict | None = None,
    source: str | None = None,
    hint: str | None = None,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> requests.Response:
    """Issue a GET request and return the response if its status is 2xx.

    Raises:
        TransportError: On connection errors, timeouts and other request failures.
        SourceUnavailable: On non-2xx responses, carrying the status code and ``hint``.
    """
    http = session if session is not None else requests
    try:
        response = http.get(url, params=params, timeout=timeout or REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"Request to {source or url} failed: {e}")
        raise TransportError(f"Could not reach {source or url}: {e}", source=source) from e

    if not 200 <= response.status_code < 300:
        logger.error(
            f"{source or url} API error response ({response.status_code}): {response.text[:500]}"
        )
        raise SourceUnavailable(
            f"HTTP error! status: {response.status_code}",
            status_code=response.status_code,
            hint=hint,
            source=source,
        )

    return response
