import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import List, Optional

from .errors import FeedParseError
from .models import (
    NO_CONTENT,
    UNKNOWN_SUBREDDIT,
    CommentRecord,
    FeedCategory,
    FeedContent,
    FeedEntry,
    now_utc,
    random_comment_id,
)


CONTENT_NOT_RECOGNIZED = "[Content format not recognized]"

# Reddit wraps rendered comment markdown in these markers
_MD_WRAPPER_RE = re.compile(r'<!-- SC_OFF --><div class="md">([\s\S]*?)</div><!-- SC_ON -->')
_TITLE_RE = re.compile(r"/u/[^/]+\s+on\s+(.+)$")
_TAG_RE = re.compile(r"<[^>]*>")
_BR_RE = re.compile(r"<br\s*/?>")
_WS_RE = re.compile(r"\s+")

# Applied in order; &amp; goes after the angle brackets so "&amp;lt;" stays "&lt;".
_ENTITIES = (
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&nbsp;", " "),
    ("&#39;", "'"),
    ("&#x200B;", ""),  # zero-width space
)


def _noop_log(msg, lvl="info"):
    return None


def _local(tag: str) -> str:
    """Strip an ``{namespace}`` prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for c in elem:
        if _local(c.tag) == name:
            return c
    return None


def _children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [c for c in elem if _local(c.tag) == name]


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    if elem is None or elem.text is None:
        return None
    return elem.text


# ---------------------------
# XML -> FeedEntry
# ---------------------------


def read_entry(elem: ET.Element) -> FeedEntry:
    link = _child(elem, "link")
    content_el = _child(elem, "content")

    content = None
    if content_el is not None:
        if content_el.attrib or len(content_el):
            content = FeedContent(text=content_el.text or None, type=content_el.get("type"))
        else:
            content = content_el.text or None

    return FeedEntry(
        id=_text(_child(elem, "id")),
        title=_text(_child(elem, "title")),
        link_href=link.get("href") if link is not None else None,
        updated=_text(_child(elem, "updated")),
        categories=[
            FeedCategory(label=c.get("label"), term=c.get("term"))
            for c in _children(elem, "category")
        ],
        content=content,
    )


def read_feed(xml_text: str) -> Optional[List[FeedEntry]]:
    """
    Parse feed XML into entries.

    Raises FeedParseError when the text is not XML at all; returns None when it
    is XML but not an Atom feed, and [] for a feed without entries.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise FeedParseError(e) from e
    if _local(root.tag) != "feed":
        return None
    return [read_entry(e) for e in _children(root, "entry")]


# ---------------------------
# Field extraction
# ---------------------------


def subreddit_from_categories(categories: List[FeedCategory]) -> str:
    for c in categories:
        if c.label and c.label.startswith("r/"):
            return c.label[len("r/"):] or UNKNOWN_SUBREDDIT
    return UNKNOWN_SUBREDDIT


def comment_id_from_entry_id(entry_id: Optional[str]) -> str:
    if not entry_id or not isinstance(entry_id, str):
        return random_comment_id()
    return entry_id.split(":")[-1] or entry_id


def link_title_from_title(title: Optional[str]) -> Optional[str]:
    """'/u/someone on Some post title' -> 'Some post title'."""
    if not title:
        return None
    m = _TITLE_RE.search(title)
    if not m:
        return None
    return m.group(1).strip() or None


def ids_from_permalink(permalink: Optional[str]):
    """
    Best-effort (parent_id, link_id) from a comment permalink.

    .../comments/<post>/<slug>/<comment> gives ("t1_<comment>", "t3_<post>").
    The parent is always reported as a comment even for top-level replies to
    the post; the URL alone cannot tell them apart.
    """
    if not permalink:
        return "", ""
    parts = permalink.rstrip("/").split("/")
    if len(parts) < 2 or not parts[-1]:
        return "", ""
    parent_id = f"t1_{parts[-1]}"
    link_id = ""
    if len(parts) >= 3 and parts[-3]:
        link_id = f"t3_{parts[-3]}"
    return parent_id, link_id


def timestamp_from_updated(updated: Optional[str]) -> float:
    if not updated or not isinstance(updated, str):
        return now_utc()
    value = updated.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return now_utc()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def clean_html_content(html: str) -> str:
    """Reduce a rendered Reddit comment to plain text."""
    if not html:
        return ""
    m = _MD_WRAPPER_RE.search(html)
    text = m.group(1) if m else html

    text = text.replace("<p>", "\n\n").replace("</p>", "")
    text = _BR_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WS_RE.sub(" ", text).strip()


def extract_content(entry: FeedEntry, log_callback=None) -> str:
    log = log_callback or _noop_log
    content = entry.content
    if content is None:
        log("No content field found in entry")
        return NO_CONTENT

    if isinstance(content, FeedContent):
        if content.type == "html" and content.text:
            return clean_html_content(content.text)
        if content.text:
            return clean_html_content(content.text)
        log(f"Unrecognized content structure: {content}")
        return CONTENT_NOT_RECOGNIZED

    return clean_html_content(content)


# ---------------------------
# Feed -> records
# ---------------------------


def entry_to_record(entry: FeedEntry, log_callback=None) -> CommentRecord:
    parent_id, link_id = ids_from_permalink(entry.link_href)
    return CommentRecord(
        id=comment_id_from_entry_id(entry.id),
        body=extract_content(entry, log_callback),
        subreddit=subreddit_from_categories(entry.categories),
        parent_id=parent_id,
        link_id=link_id,
        created_utc=timestamp_from_updated(entry.updated),
        link_title=link_title_from_title(entry.title),
    )


def parse_feed(xml_text: str, limit: int, log_callback=None) -> List[CommentRecord]:
    log = log_callback or _noop_log
    entries = read_feed(xml_text)
    if entries is None:
        log("RSS feed has unexpected structure", "warning")
        return []
    log(f"Parsed {len(entries)} entries from RSS feed")

    comments: List[CommentRecord] = []
    for entry in entries[: max(0, int(limit))]:
        try:
            comments.append(entry_to_record(entry, log))
        except Exception as e:
            log(f"Error processing RSS entry: {e} ({entry})", "error")
    log(f"Successfully extracted {len(comments)} comments from RSS feed", "success")
    return comments
