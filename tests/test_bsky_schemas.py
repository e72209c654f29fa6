# tests/test_bsky_schemas.py
import pytest
from pydantic import ValidationError

from threadline.adapters.bsky.schemas import (
    BskyThreadInspector,
    PostView,
    ThreadViewPost,
    is_thread_view_post,
    validate_thread_view_post,
)


def test_post_view_schema_valid(threads) -> None:
    post = PostView.model_validate(threads.post("abc"))

    assert post.uri == "at://did:plc:alice/app.bsky.feed.post/abc"
    assert post.author.handle == "alice.test"
    assert post.author.display_name == "Alice"
    assert post.indexed_at == "2026-01-26T10:00:01Z"
    assert post.like_count == 0


def test_post_view_keeps_unknown_fields(threads) -> None:
    data = threads.post("abc")
    data["embed"] = {"$type": "app.bsky.embed.images#view", "images": []}

    post = PostView.model_validate(data)

    assert post.model_extra["embed"]["images"] == []


def test_post_view_rejects_non_at_uri(threads) -> None:
    data = threads.post("abc")
    data["uri"] = "https://bsky.app/profile/alice.test/post/abc"

    with pytest.raises(ValidationError):
        PostView.model_validate(data)


def test_thread_view_post_missing_post_fails() -> None:
    with pytest.raises(ValidationError):
        ThreadViewPost.model_validate({"$type": "app.bsky.feed.defs#threadViewPost"})


def test_thread_view_post_replies_must_be_a_list(threads) -> None:
    node = threads.node("abc")
    node["replies"] = {"not": "a list"}

    assert validate_thread_view_post(node) is False


def test_shape_check(threads) -> None:
    assert is_thread_view_post(threads.node("abc")) is True
    assert is_thread_view_post(threads.not_found("abc")) is False
    assert is_thread_view_post(threads.blocked("abc")) is False
    assert is_thread_view_post({"post": threads.post("abc")}) is False
    assert is_thread_view_post(None) is False
    assert is_thread_view_post("app.bsky.feed.defs#threadViewPost") is False


def test_validation(threads) -> None:
    assert validate_thread_view_post(threads.node("abc")) is True
    assert validate_thread_view_post(threads.node("abc", replies=[threads.not_found("x")])) is True
    assert validate_thread_view_post(threads.malformed("abc")) is False


def test_inspector_delegates(threads) -> None:
    inspector = BskyThreadInspector()

    assert inspector.is_full_thread_node(threads.node("abc")) is True
    assert inspector.is_full_thread_node(threads.blocked("abc")) is False
    assert inspector.validate(threads.node("abc")) is True
    assert inspector.validate(threads.malformed("abc")) is False
