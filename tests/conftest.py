"""Shared fixtures: a fake clock, canned upstream payloads and stub collaborators."""

from typing import Dict, List, Union

import httpx
import pytest


FEED_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<feed xmlns="http://www.w3.org/2005/Atom" xmlns:media="http://search.yahoo.com/mrss/">'
    '<category term="testuser" label="r/testuser"/>'
    "<updated>2024-01-15T13:00:00+00:00</updated>"
    '<id>/user/testuser/comments/.rss</id>'
    '<link rel="alternate" href="https://www.reddit.com/user/testuser/comments/" type="text/html"/>'
    "<title>overview for testuser</title>"
)
FEED_FOOTER = "</feed>"


def feed_entry(
    comment_id: str = "kx1abcd",
    *,
    subreddit: str = "python",
    post_id: str = "1a2b3c",
    title: str = "/u/testuser on Some post about dicts",
    body_html: str = (
        "&lt;!-- SC_OFF --&gt;&lt;div class=&quot;md&quot;&gt;&lt;p&gt;Use a "
        "&lt;code&gt;dict&lt;/code&gt; here &amp;amp; there.&lt;/p&gt;&lt;/div&gt;&lt;!-- SC_ON --&gt;"
    ),
    updated: str = "2024-01-15T12:30:00+00:00",
    with_id: bool = True,
) -> str:
    parts = [
        "<entry>",
        "<author><name>/u/testuser</name><uri>https://www.reddit.com/user/testuser</uri></author>",
        f'<category term="{subreddit}" label="r/{subreddit}"/>',
        f'<content type="html">{body_html}</content>',
    ]
    if with_id:
        parts.append(f"<id>t1_{comment_id}</id>")
    parts += [
        f'<link href="https://www.reddit.com/r/{subreddit}/comments/{post_id}/some_post/{comment_id}/"/>',
        f"<updated>{updated}</updated>",
        f"<title>{title}</title>",
        "</entry>",
    ]
    return "".join(parts)


def make_feed(*entries: str) -> str:
    return FEED_HEADER + "".join(entries) + FEED_FOOTER


def listing(*items: Dict) -> Dict:
    return {"kind": "Listing", "data": {"after": None, "children": [{"kind": "t1", "data": d} for d in items]}}


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly and records each wait."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class StubFetcher:
    """Stands in for BrowserFetcher: answers by URL prefix and records every call."""

    def __init__(self, routes: Dict[str, Union[httpx.Response, Exception]]):
        self.routes = routes
        self.calls: List[str] = []
        self.closed = False

    async def fetch(self, url: str, retries=None) -> httpx.Response:
        self.calls.append(url)
        for prefix, result in self.routes.items():
            if url.startswith(prefix):
                if isinstance(result, Exception):
                    raise result
                return result
        raise AssertionError(f"unexpected url {url}")

    async def close(self):
        self.closed = True


class LogRecorder:
    def __init__(self):
        self.messages: List[tuple] = []

    def __call__(self, msg: str, level: str = "info") -> None:
        self.messages.append((level, msg))

    def at(self, level: str) -> List[str]:
        return [m for lvl, m in self.messages if lvl == level]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def log():
    return LogRecorder()


@pytest.fixture
def sample_feed():
    return make_feed(
        feed_entry("c1", subreddit="python", post_id="p1", title="/u/testuser on First post"),
        feed_entry("c2", subreddit="AskReddit", post_id="p2", title="/u/testuser on Second post"),
        feed_entry("c3", subreddit="rust", post_id="p3", title="/u/testuser on Third post"),
    )


@pytest.fixture
def sample_listing():
    return listing(
        {
            "id": "j1",
            "body": "Top level reply",
            "subreddit": "python",
            "parent_id": "t3_abc",
            "link_id": "t3_abc",
            "created_utc": 1705321800.0,
        },
        {
            "id": "j2",
            "body": "Nested reply",
            "subreddit": "rust",
            "parent_id": "t1_def",
            "link_id": "t3_ghi",
            "created_utc": 1705325400.0,
        },
    )
