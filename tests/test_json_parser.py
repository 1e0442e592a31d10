"""Tests for the JSON listing normalizer."""

import re

import pytest

from conftest import listing
from reddit_comment_lookup import json_parser
from reddit_comment_lookup.json_parser import enrich_parent_context, parse_json
from reddit_comment_lookup.models import CommentRecord


def test_empty_children_is_empty_list():
    assert parse_json({"data": {"children": []}}, 10) == []


@pytest.mark.parametrize(
    "payload",
    [None, [], "nope", {}, {"data": None}, {"data": {}}, {"data": {"children": "x"}}],
)
def test_unexpected_shape_is_empty_list(payload):
    assert parse_json(payload, 10) == []


def test_direct_mapping(sample_listing):
    records = parse_json(sample_listing, 10)

    assert [r.id for r in records] == ["j1", "j2"]
    first = records[0]
    assert first.body == "Top level reply"
    assert first.subreddit == "python"
    assert first.parent_id == "t3_abc"
    assert first.link_id == "t3_abc"
    assert first.created_utc == 1705321800.0


def test_body_is_not_html_cleaned():
    records = parse_json(listing({"id": "a", "body": "<p>kept &amp; raw</p>"}), 10)
    assert records[0].body == "<p>kept &amp; raw</p>"


def test_fallbacks_for_missing_fields(monkeypatch):
    monkeypatch.setattr(json_parser, "now_utc", lambda: 99.0)
    records = parse_json(listing({}), 10)

    rec = records[0]
    assert re.fullmatch(r"id_[a-z0-9]{7}", rec.id)
    assert rec.body == "[No content]"
    assert rec.subreddit == "unknown"
    assert rec.parent_id == ""
    assert rec.link_id == ""
    assert rec.created_utc == 99.0


def test_out_of_range_timestamp_falls_back_to_now(monkeypatch):
    monkeypatch.setattr(json_parser, "now_utc", lambda: 99.0)
    records = parse_json(listing({"id": "big", "created_utc": 10**400}, {"id": "ok", "created_utc": 5}), 10)

    assert [r.created_utc for r in records] == [99.0, 5.0]


def test_truncates_to_limit():
    payload = listing(*[{"id": f"c{i}", "body": "x"} for i in range(10)])
    assert [r.id for r in parse_json(payload, 3)] == ["c0", "c1", "c2"]


def test_children_without_data_are_skipped():
    payload = {"data": {"children": [{"kind": "more"}, None, {"kind": "t1", "data": {"id": "ok"}}]}}
    assert [r.id for r in parse_json(payload, 10)] == ["ok"]


def test_post_parent_gets_link_title():
    records = parse_json(listing({"id": "a", "parent_id": "t3_abc"}), 10)
    assert records[0].link_title == "Post: abc"
    assert records[0].parent_body is None


def test_comment_parent_gets_parent_body(sample_listing):
    records = parse_json(sample_listing, 10)
    assert records[1].parent_body == "Comment: def"
    assert records[1].link_title is None


def test_existing_link_title_is_kept():
    records = parse_json(listing({"id": "a", "parent_id": "t3_abc", "link_title": "Real title"}), 10)
    assert records[0].link_title == "Real title"


def test_enrich_does_not_overwrite_parent_body():
    rec = CommentRecord(
        id="a", body="b", subreddit="s", parent_id="t1_x", link_id="", created_utc=1.0, parent_body="known"
    )
    assert enrich_parent_context([rec])[0].parent_body == "known"


def test_enrich_ignores_unknown_parent_kind():
    rec = CommentRecord(id="a", body="b", subreddit="s", parent_id="", link_id="", created_utc=1.0)
    out = enrich_parent_context([rec])[0]
    assert out.link_title is None
    assert out.parent_body is None
