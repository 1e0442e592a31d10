from typing import List, Optional


class RedditLookupError(Exception):
    """Base class for every failure surfaced by a comment lookup."""


class InvalidUsername(RedditLookupError):
    def __init__(self, username: object):
        self.username = username
        super().__init__(f"Invalid username: {username!r}")


class HttpError(RedditLookupError):
    def __init__(self, status: int, status_text: str = "", url: str = ""):
        self.status = status
        self.status_text = status_text
        self.url = url
        super().__init__(f"HTTP error: {status} {status_text}".rstrip())


class FetchExhausted(RedditLookupError):
    def __init__(self, url: str, retries: int, last_error: Optional[BaseException] = None):
        self.url = url
        self.retries = retries
        self.last_error = last_error
        msg = f"Failed after {retries} attempts: {url}"
        if last_error is not None:
            msg = f"{msg} ({last_error})"
        super().__init__(msg)


class FeedParseError(RedditLookupError):
    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"RSS parsing error: {cause}")


class AllApproachesFailed(RedditLookupError):
    def __init__(self, username: str, errors: Optional[List[BaseException]] = None):
        self.username = username
        self.errors = list(errors or [])
        super().__init__(f"All Reddit approaches failed for {username}")


class LookupTimeout(RedditLookupError):
    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Request timed out after {seconds:g} seconds")
