"""
Fetches the raw documentation page.

A single blocking GET. Failures are not retried: the run stops with a
FetchError and the next scheduled run tries again.
"""

import requests

from .config import DEFAULT_TIMEOUT, DOCUMENTATION_URL
from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

USER_AGENT = "apigen/0.1 (+documentation sync)"


def fetch_documentation(url: str = DOCUMENTATION_URL, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    Download the documentation page as raw bytes.

    Args:
        url: Documentation page URL
        timeout: Seconds to wait for the server

    Returns:
        Response body, undecoded

    Raises:
        FetchError: on connection errors, timeouts and non-2xx responses
    """
    logger.info(f"Fetching documentation page {url}")
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Could not fetch documentation: {e}", url=url)

    logger.debug(f"Fetched {len(response.content)} bytes from {url}")
    return response.content
