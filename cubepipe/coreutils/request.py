import logging
import time
from urllib3.util.retry import Retry
import requests
from requests.adapters import HTTPAdapter
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STRATEGY = Retry(
    total=5,  # Total number of retries
    backoff_factor=2,  # The backoff factor (2 seconds, then 4, 8...)
    status_forcelist=[429, 500, 502, 503, 504],  # HTTP status codes to retry on
)


def new_session() -> requests.Session:
    """Create a new requests session with retry strategy"""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=DEFAULT_RETRY_STRATEGY)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    # Set default headers
    session.headers.update(
        {"User-Agent": "cubepipe/1.0", "Accept": "application/json"}
    )

    return session


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def get_json(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = 30,
) -> Dict[str, Any]:
    """Fetch and parse a JSON document

    Args:
        session: HTTP session to use (transport retries come from its adapter)
        url: URL to fetch
        params: Optional query parameters
        timeout: Request timeout in seconds

    Returns:
        Parsed JSON response

    Raises:
        requests.RequestException: On HTTP errors
        ValueError: On invalid JSON responses
    """
    start = time.time()
    try:
        response = session.get(url, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise requests.RequestException(f"HTTP request failed for {url}: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise ValueError(f"Invalid JSON response from {url}: {e}") from e

    logger.info(f"Fetched from {url}: {time.time() - start:.2f} seconds")
    return data
