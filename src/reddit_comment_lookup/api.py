"""
FastAPI application exposing the comment lookup.

    GET /comments?username=<name>[&limit=<n>]

Success returns ``{"comments": [...]}``. Upstream failures and timeouts still
return the same shape (``comments`` is empty) with status 500, so callers
never need a second parser for the error case.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import CACHE_CONTROL, DEFAULT_COMMENT_LIMIT, LOOKUP_TIMEOUT
from .errors import InvalidUsername
from .fetcher import BrowserFetcher
from .logging_utils import setup_logging
from .reddit_service import (
    RedditCommentService,
    get_user_comments_with_timeout,
    normalize_username,
)


logger = logging.getLogger(__name__)

MAX_COMMENT_LIMIT = 100

ServiceFactory = Callable[[FastAPI], RedditCommentService]


def response_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Cache-Control": CACHE_CONTROL,
    }


def _json(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=response_headers())


def default_service_factory(app: FastAPI) -> RedditCommentService:
    # All requests share the app's fetcher, and with it one pacing clock.
    fetcher = getattr(app.state, "fetcher", None)
    if fetcher is None:
        raise RuntimeError("No fetcher on app state; the app lifespan has not started")
    return RedditCommentService(fetcher=fetcher)


def create_app(
    service_factory: Optional[ServiceFactory] = None,
    *,
    timeout: float = LOOKUP_TIMEOUT,
) -> FastAPI:
    factory = service_factory or default_service_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting reddit comment lookup API")
        if service_factory is None:
            # Logs through the reddit_comment_lookup.fetcher logger.
            app.state.fetcher = BrowserFetcher()
        try:
            yield
        finally:
            fetcher = getattr(app.state, "fetcher", None)
            if fetcher is not None:
                await fetcher.close()
                app.state.fetcher = None
            logger.info("Reddit comment lookup API stopped")

    app = FastAPI(title="Reddit Comment Lookup", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/comments")
    async def get_comments(request: Request) -> JSONResponse:
        usernames = request.query_params.getlist("username")
        if len(usernames) != 1:
            return _json(400, {"error": "Invalid username parameter"})
        try:
            username = normalize_username(usernames[0])
        except InvalidUsername:
            return _json(400, {"error": "Invalid username parameter"})

        raw_limit = request.query_params.get("limit")
        limit = DEFAULT_COMMENT_LIMIT
        if raw_limit is not None:
            try:
                limit = int(raw_limit)
            except ValueError:
                return _json(400, {"error": "Invalid limit parameter"})
            if not 1 <= limit <= MAX_COMMENT_LIMIT:
                return _json(400, {"error": "Invalid limit parameter"})

        service = factory(request.app)
        try:
            comments = await get_user_comments_with_timeout(service, username, limit, timeout)
        except Exception as e:
            logger.error(f"API error fetching Reddit comments for {username}: {e}", exc_info=True)
            return _json(
                500,
                {
                    "error": "Failed to fetch Reddit data",
                    "message": str(e) or "Unknown error occurred",
                    "comments": [],
                },
            )
        return _json(200, {"comments": [c.to_dict() for c in comments]})

    @app.api_route("/comments", methods=["POST", "PUT", "PATCH", "DELETE"])
    async def comments_method_not_allowed() -> JSONResponse:
        resp = _json(405, {"error": "Method not allowed"})
        resp.headers["Allow"] = "GET"
        return resp

    return app


setup_logging()
app = create_app()
