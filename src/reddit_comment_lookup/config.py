import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip() in ("1", "true", "True", "yes", "YES")


# Upstream hosts (unauthenticated public endpoints)
REDDIT_FEED_BASE_URL = os.getenv("REDDIT_FEED_BASE_URL", "https://www.reddit.com")
REDDIT_JSON_BASE_URL = os.getenv("REDDIT_JSON_BASE_URL", "https://old.reddit.com")
REDDIT_REFERER = os.getenv("REDDIT_REFERER", "https://www.reddit.com/")

# Rate limiting (seconds between the start of two outbound requests)
MIN_REQUEST_INTERVAL = float(os.getenv("MIN_REQUEST_INTERVAL", "2.0"))

# Retry / backoff: wait BACKOFF_BASE_SECONDS * 2**attempt between attempts
FETCH_RETRIES = int(os.getenv("FETCH_RETRIES", "3"))
BACKOFF_BASE_SECONDS = float(os.getenv("BACKOFF_BASE_SECONDS", "1.0"))
FAIL_FAST_ON_403 = _env_flag("FAIL_FAST_ON_403")

# Pause between the feed strategy failing and the JSON strategy starting
STRATEGY_COOLDOWN = float(os.getenv("STRATEGY_COOLDOWN", "1.0"))

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30.0"))
DEFAULT_COMMENT_LIMIT = int(os.getenv("DEFAULT_COMMENT_LIMIT", "40"))

# HTTP surface
LOOKUP_TIMEOUT = float(os.getenv("LOOKUP_TIMEOUT", "15.0"))
CACHE_CONTROL = os.getenv("CACHE_CONTROL", "public, s-maxage=300, stale-while-revalidate=60")

# Logging
LOG_ENABLED = _env_flag("LOG_ENABLED", "1")
LOG_VERBOSE = _env_flag("LOG_VERBOSE")
