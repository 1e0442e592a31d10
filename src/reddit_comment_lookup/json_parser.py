from typing import Any, Iterable, List, Optional

from .models import (
    NO_CONTENT,
    UNKNOWN_SUBREDDIT,
    CommentRecord,
    ListingComment,
    now_utc,
    random_comment_id,
)


def listing_children(payload: Any) -> Optional[list]:
    """``payload["data"]["children"]`` if the payload has that shape, else None."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    children = data.get("children")
    if not isinstance(children, list):
        return None
    return children


def listing_to_record(item: ListingComment) -> CommentRecord:
    return CommentRecord(
        id=item.id or random_comment_id(),
        body=item.body or NO_CONTENT,
        subreddit=item.subreddit or UNKNOWN_SUBREDDIT,
        parent_id=item.parent_id or "",
        link_id=item.link_id or "",
        created_utc=item.created_utc or now_utc(),
        link_title=item.link_title,
    )


def enrich_parent_context(records: Iterable[CommentRecord]) -> List[CommentRecord]:
    """
    Fill ``link_title`` / ``parent_body`` with short placeholders derived from
    ``parent_id`` when they are missing. Resolving the real parent would need
    one more request per comment.
    """
    out: List[CommentRecord] = []
    for rec in records:
        pid = rec.parent_id or ""
        if pid.startswith("t3_") and not rec.link_title:
            rec.link_title = f"Post: {pid[3:]}"
        elif pid.startswith("t1_") and not rec.parent_body:
            rec.parent_body = f"Comment: {pid[3:]}"
        out.append(rec)
    return out


def parse_json(payload: Any, limit: int) -> List[CommentRecord]:
    children = listing_children(payload)
    if children is None:
        return []

    records: List[CommentRecord] = []
    for child in children:
        if len(records) >= limit:
            break
        data = child.get("data") if isinstance(child, dict) else None
        if not isinstance(data, dict):
            continue
        records.append(listing_to_record(ListingComment.from_data(data)))
    return enrich_parent_context(records)
