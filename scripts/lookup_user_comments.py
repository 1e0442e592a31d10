#!/usr/bin/env python3
import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Allow running without installing the package
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from reddit_comment_lookup.api_client import fetch_comments_from_api  # noqa: E402
from reddit_comment_lookup.config import DEFAULT_COMMENT_LIMIT, LOOKUP_TIMEOUT  # noqa: E402
from reddit_comment_lookup.errors import RedditLookupError  # noqa: E402
from reddit_comment_lookup.reddit_service import (  # noqa: E402
    RedditCommentService,
    get_user_comments_with_timeout,
)


def utc_iso(ts: float) -> str:
    try:
        return datetime.fromtimestamp(float(ts), tz=timezone.utc).isoformat()
    except (TypeError, ValueError, OverflowError, OSError):
        return ""


def parse_args():
    p = argparse.ArgumentParser(description="Fetch a Reddit user's recent comments (feed first, JSON fallback).")
    p.add_argument("username", type=str, help="Reddit username (with or without u/).")
    p.add_argument("--limit", type=int, default=DEFAULT_COMMENT_LIMIT, help="Max comments to return.")
    p.add_argument("--timeout", type=float, default=LOOKUP_TIMEOUT, help="Overall deadline in seconds (0=none).")
    p.add_argument("--json", action="store_true", help="Print records as JSON instead of a summary.")
    p.add_argument("--verbose", action="store_true", help="Log request headers and raw payload excerpts.")
    p.add_argument("--api-url", type=str, default="", help="Go through a running /comments endpoint at this base URL.")
    return p.parse_args()


def log(msg: str, level: str = "info"):
    prefix = {"info": "[*]", "success": "[+]", "warning": "[!]", "error": "[x]", "debug": "[.]"}.get(level, "[*]")
    print(f"{prefix} {msg}", file=sys.stderr)


async def main() -> int:
    args = parse_args()

    if args.api_url:
        try:
            comments = await fetch_comments_from_api(args.api_url, args.username, limit=args.limit)
        except RedditLookupError as e:
            log(str(e), "error")
            return 1
        log(f"received {len(comments)} comments from {args.api_url}", "success")
    else:
        service = RedditCommentService(log_callback=log, verbose=args.verbose)
        try:
            records = await get_user_comments_with_timeout(
                service, args.username, args.limit, args.timeout or None
            )
        except (RedditLookupError, ValueError) as e:
            log(str(e), "error")
            return 1
        finally:
            await service.close()
        comments = [r.to_dict() for r in records]

    if args.json:
        print(json.dumps(comments, ensure_ascii=False, indent=2))
        return 0

    for c in comments:
        where = f"r/{c.get('subreddit', 'unknown')}"
        context = c.get("link_title") or c.get("parent_body") or ""
        body = (c.get("body") or "").replace("\n", " ")
        print(f"{utc_iso(c.get('created_utc', 0))}  {where:<24} {body[:100]}")
        if context:
            print(f"    ↳ {context[:100]}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
