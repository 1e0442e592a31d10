import random
import string
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union


NO_CONTENT = "[No content]"
UNKNOWN_SUBREDDIT = "unknown"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def random_comment_id(rng: Optional[random.Random] = None) -> str:
    """Placeholder id for items the upstream returned without one: ``id_`` + 7 chars."""
    r = rng or random
    return "id_" + "".join(r.choice(_ID_ALPHABET) for _ in range(7))


def now_utc() -> float:
    return time.time()


@dataclass
class CommentRecord:
    id: str
    body: str
    subreddit: str
    parent_id: str
    link_id: str
    created_utc: float
    link_title: Optional[str] = None
    parent_body: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        for key in ("link_title", "parent_body"):
            if d[key] is None:
                d.pop(key)
        return d


# ---------------------------
# Upstream payload shapes
# ---------------------------


@dataclass
class FeedCategory:
    label: Optional[str] = None
    term: Optional[str] = None


@dataclass
class FeedContent:
    text: Optional[str] = None
    type: Optional[str] = None


@dataclass
class FeedEntry:
    """One Atom ``<entry>`` with every field optional."""

    id: Optional[str] = None
    title: Optional[str] = None
    link_href: Optional[str] = None
    updated: Optional[str] = None
    categories: List[FeedCategory] = field(default_factory=list)
    # None when <content> is absent, str when it has no attributes,
    # FeedContent when it carries a type or is otherwise structured.
    content: Union[None, str, FeedContent] = None


@dataclass
class ListingComment:
    """``data`` object of one ``t1`` child in a /comments.json listing."""

    id: Optional[str] = None
    body: Optional[str] = None
    subreddit: Optional[str] = None
    parent_id: Optional[str] = None
    link_id: Optional[str] = None
    created_utc: Optional[float] = None
    link_title: Optional[str] = None

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "ListingComment":
        created = data.get("created_utc")
        try:
            created_utc = float(created) if created not in (None, "") else None
        except (TypeError, ValueError, OverflowError):
            created_utc = None
        return cls(
            id=_str_or_none(data.get("id")),
            body=_str_or_none(data.get("body")),
            subreddit=_str_or_none(data.get("subreddit")),
            parent_id=_str_or_none(data.get("parent_id")),
            link_id=_str_or_none(data.get("link_id")),
            created_utc=created_utc,
            link_title=_str_or_none(data.get("link_title")),
        )


def _str_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)
