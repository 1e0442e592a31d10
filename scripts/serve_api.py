#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

# Allow running without installing the package
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import uvicorn  # noqa: E402


def parse_args():
    p = argparse.ArgumentParser(description="Serve GET /comments for Reddit comment lookups.")
    p.add_argument("--host", type=str, default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development).")
    return p.parse_args()


def main():
    args = parse_args()
    # One worker: the pacing clock lives in the process, more workers would each pace separately.
    uvicorn.run(
        "reddit_comment_lookup.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1,
    )


if __name__ == "__main__":
    main()
