import logging

import httpx

from ..errors import ToolExecutionError
from .registry import tool

logger = logging.getLogger(__name__)

USER_AGENT = "Ada/1.0"
FETCH_TIMEOUT = 30
# Limit response size to 100KB
MAX_CONTENT_SIZE = 100_000


@tool(category="web", params={"url": {"description": "The URL to fetch"}})
def webfetch(url: str) -> str:
    """Fetch content from a URL (useful for reading documentation, APIs, etc.)."""
    if not url.startswith(("http://", "https://")):
        raise ToolExecutionError(f"Unsupported URL: {url}. Only http and https are allowed.")

    try:
        with httpx.Client(
            timeout=FETCH_TIMEOUT,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            resp = client.get(url)
            resp.raise_for_status()
            content = resp.text
    except httpx.HTTPStatusError as e:
        raise ToolExecutionError(
            f"HTTP request failed with status: {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        logger.warning("Fetching %s failed: %s", url, e)
        raise ToolExecutionError(f"Failed to fetch {url}: {e}") from e

    if len(content) > MAX_CONTENT_SIZE:
        return f"{content[:MAX_CONTENT_SIZE]}... (truncated, total size: {len(content)} characters)"
    return content
