from typing import Any, Dict, List, Optional

import httpx

from .config import LOOKUP_TIMEOUT
from .errors import RedditLookupError


async def fetch_comments_from_api(
    base_url: str,
    username: str,
    *,
    limit: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = LOOKUP_TIMEOUT + 5.0,
) -> List[Dict[str, Any]]:
    """Call a running ``GET /comments`` endpoint and return its comment dicts."""
    params: Dict[str, Any] = {"username": username}
    if limit is not None:
        params["limit"] = int(limit)

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=timeout)
    try:
        resp = await client.get(f"{base_url.rstrip('/')}/comments", params=params)
    finally:
        if owns_client:
            await client.aclose()

    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    if not resp.is_success:
        message = data.get("message") or data.get("error") or "Failed to fetch comments"
        raise RedditLookupError(message)
    return list(data.get("comments") or [])
