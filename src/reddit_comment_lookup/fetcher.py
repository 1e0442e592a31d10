import asyncio
import logging
import random
from typing import Awaitable, Callable, Dict, Optional, Sequence

import httpx

from .config import (
    BACKOFF_BASE_SECONDS,
    FAIL_FAST_ON_403,
    FETCH_RETRIES,
    HTTP_TIMEOUT,
    MIN_REQUEST_INTERVAL,
    REDDIT_REFERER,
)
from .errors import FetchExhausted, HttpError
from .logging_utils import logger_callback
from .rate_limiter import RequestPacer
from .retry import RetryPolicy


logger = logging.getLogger(__name__)

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.2.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)


def browser_headers(user_agent: str, referer: str = REDDIT_REFERER) -> Dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Referer": referer,
        "Cache-Control": "max-age=0",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "same-origin",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
    }


class BrowserFetcher:
    """
    GET pages from Reddit looking like a low-frequency desktop browser.

    - each fetch waits once for its turn on the pacer; retries only wait out the backoff
    - every attempt rotates the User-Agent
    - non-2xx and transport errors are retried with exponential backoff
    """

    def __init__(
        self,
        *,
        pacer: Optional[RequestPacer] = None,
        retry_policy: Optional[RetryPolicy] = None,
        user_agents: Sequence[str] = USER_AGENTS,
        rng: Optional[random.Random] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        log_callback=None,
        fail_fast_on_403: bool = FAIL_FAST_ON_403,
    ):
        if not user_agents:
            raise ValueError("user_agents must not be empty")
        self._log = log_callback or logger_callback(logger)
        self.pacer = pacer or RequestPacer(MIN_REQUEST_INTERVAL)
        self.retry_policy = retry_policy or RetryPolicy(FETCH_RETRIES, BACKOFF_BASE_SECONDS)
        self.user_agents = list(user_agents)
        self._rng = rng or random.Random()
        self._sleep = sleep
        self.fail_fast_on_403 = bool(fail_fast_on_403)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=HTTP_TIMEOUT,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "BrowserFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def random_user_agent(self) -> str:
        return self._rng.choice(self.user_agents)

    async def fetch(self, url: str, retries: Optional[int] = None) -> httpx.Response:
        policy = self.retry_policy
        if retries is not None:
            policy = RetryPolicy(retries, self.retry_policy.base_delay)

        self._log(f"Making request to: {url}")
        await self.pacer.await_turn()
        state = policy.start()
        while True:
            headers = browser_headers(self.random_user_agent())
            self._log(f"Attempt {state.attempt + 1}/{policy.retries} for {url}")
            self._log(f"Request headers: {headers}", "debug")
            try:
                resp = await self.client.get(url, headers=headers)
                self._log(f"Response status: {resp.status_code} {resp.reason_phrase}")
                if not resp.is_success:
                    if resp.status_code == 403:
                        self._log(f"403 Blocked response for URL: {url}", "warning")
                    raise HttpError(resp.status_code, resp.reason_phrase, url)
                return resp
            except (HttpError, httpx.HTTPError) as e:
                self._log(f"Attempt {state.attempt + 1} failed: {e}", "warning")
                if self.fail_fast_on_403 and isinstance(e, HttpError) and e.status == 403:
                    raise FetchExhausted(url, state.attempt + 1, e) from e

                decision = policy.on_failure(state, e)
                if not decision.retry:
                    raise FetchExhausted(url, policy.retries, e) from e

                self._log(f"Retrying in {decision.delay * 1000:.0f}ms...")
                await self._sleep(decision.delay)
                state = decision.state
