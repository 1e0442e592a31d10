import asyncio
import logging
import re
import urllib.parse
from typing import Awaitable, Callable, List, Optional

from .config import (
    DEFAULT_COMMENT_LIMIT,
    LOG_ENABLED,
    LOG_VERBOSE,
    REDDIT_FEED_BASE_URL,
    REDDIT_JSON_BASE_URL,
    STRATEGY_COOLDOWN,
)
from .errors import AllApproachesFailed, InvalidUsername, LookupTimeout
from .feed_parser import parse_feed
from .fetcher import BrowserFetcher
from .json_parser import enrich_parent_context, parse_json
from .logging_utils import logger_callback
from .models import CommentRecord


logger = logging.getLogger(__name__)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]{3,20}$")


def normalize_username(username) -> str:
    """Accept 'name', 'u/name' or '/u/name'; raise InvalidUsername otherwise."""
    if not isinstance(username, str):
        raise InvalidUsername(username)
    name = username.strip()
    for prefix in ("/u/", "u/"):
        if name.lower().startswith(prefix):
            name = name[len(prefix):]
            break
    name = name.rstrip("/")
    if not _USERNAME_RE.match(name):
        raise InvalidUsername(username)
    return name


class RedditCommentService:
    """
    Fetch a user's recent comments without the official API.

    Strategy 1: Atom feed   <REDDIT_FEED_BASE_URL>/user/<name>/comments/.rss
    Strategy 2: JSON        <REDDIT_JSON_BASE_URL>/user/<name>/comments.json
    Strategies run one after the other, never concurrently.
    """

    def __init__(
        self,
        fetcher: Optional[BrowserFetcher] = None,
        *,
        cooldown: float = STRATEGY_COOLDOWN,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        log_callback=None,
        enabled: bool = LOG_ENABLED,
        verbose: bool = LOG_VERBOSE,
        feed_base_url: str = REDDIT_FEED_BASE_URL,
        json_base_url: str = REDDIT_JSON_BASE_URL,
    ):
        self._sink = log_callback or logger_callback(logger)
        self.enabled = bool(enabled)
        self.verbose = bool(verbose)
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or BrowserFetcher(log_callback=self._log)
        self.cooldown = float(cooldown)
        self._sleep = sleep
        self.feed_base_url = feed_base_url.rstrip("/")
        self.json_base_url = json_base_url.rstrip("/")

    def _log(self, msg: str, level: str = "info") -> None:
        if not self.enabled:
            return
        if level == "debug" and not self.verbose:
            return
        self._sink(f"[RedditService] {msg}", level)

    def set_logging(self, enabled: Optional[bool] = None, verbose: Optional[bool] = None) -> None:
        if enabled is not None:
            self.enabled = bool(enabled)
        if verbose is not None:
            self.verbose = bool(verbose)
        self._log(f"Logging settings updated: enabled={self.enabled} verbose={self.verbose}")

    async def close(self):
        if self._owns_fetcher:
            await self.fetcher.close()

    async def __aenter__(self) -> "RedditCommentService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ---------------------------
    # URLs
    # ---------------------------

    def feed_url(self, username: str) -> str:
        return f"{self.feed_base_url}/user/{urllib.parse.quote(username, safe='')}/comments/.rss"

    def json_url(self, username: str, limit: int) -> str:
        qs = urllib.parse.urlencode({"limit": int(limit), "raw_json": 1})
        return f"{self.json_base_url}/user/{urllib.parse.quote(username, safe='')}/comments.json?{qs}"

    # ---------------------------
    # Strategies
    # ---------------------------

    async def fetch_from_rss(self, username: str, limit: int) -> List[CommentRecord]:
        self._log(f"Fetching RSS feed for user: {username}")
        resp = await self.fetcher.fetch(self.feed_url(username))
        xml_text = resp.text
        self._log(f"RSS response: {xml_text[:500]}...", "debug")
        return parse_feed(xml_text, limit, log_callback=self._log)

    async def fetch_from_json(self, username: str, limit: int) -> List[CommentRecord]:
        self._log(f"Fetching JSON listing for user: {username}")
        resp = await self.fetcher.fetch(self.json_url(username, limit))
        payload = resp.json()
        comments = parse_json(payload, limit)
        if not comments:
            self._log("JSON listing had no comments or an unusual structure")
        return comments

    async def try_multiple_approaches(self, username: str, limit: int) -> List[CommentRecord]:
        try:
            self._log(f"Trying RSS feed approach for {username}")
            return await self.fetch_from_rss(username, limit)
        except Exception as rss_error:
            self._log(f"RSS approach failed: {rss_error}", "warning")
            await self._sleep(self.cooldown)
            try:
                self._log(f"Trying JSON API approach for {username}")
                return await self.fetch_from_json(username, limit)
            except Exception as json_error:
                self._log(f"JSON API approach also failed: {json_error}", "error")
                raise AllApproachesFailed(username, [rss_error, json_error]) from json_error

    async def get_user_comments(
        self, username: str, limit: int = DEFAULT_COMMENT_LIMIT
    ) -> List[CommentRecord]:
        name = normalize_username(username)
        if int(limit) < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self._log(f"Fetching comments for user: {name}, limit: {limit}")

        comments = await self.try_multiple_approaches(name, int(limit))
        comments = enrich_parent_context(comments)
        self._log(f"Successfully processed {len(comments)} comments for {name}", "success")
        return comments


async def get_user_comments_with_timeout(
    service: RedditCommentService,
    username: str,
    limit: int = DEFAULT_COMMENT_LIMIT,
    timeout: Optional[float] = None,
) -> List[CommentRecord]:
    """Run one lookup under a deadline; the in-flight attempt is cancelled on expiry."""
    if timeout is None:
        return await service.get_user_comments(username, limit)
    try:
        return await asyncio.wait_for(service.get_user_comments(username, limit), timeout)
    except asyncio.TimeoutError as e:
        raise LookupTimeout(timeout) from e
