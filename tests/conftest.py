"""Global pytest fixtures for the threadline test suite.

Threads are built as raw AppView JSON (plain dicts), the same shape
app.bsky.feed.getPostThread returns, so the flattening code and the lexicon
schemas are exercised together.
"""

from types import SimpleNamespace

import pytest

from threadline.adapters.bsky.schemas import BLOCKED_POST, NOT_FOUND_POST, THREAD_VIEW_POST

DID = "did:plc:alice"


def make_post(rkey: str, handle: str = "alice.test", did: str = DID, text: str | None = None) -> dict:
    return {
        "uri": f"at://{did}/app.bsky.feed.post/{rkey}",
        "cid": f"bafyrei{rkey}",
        "author": {"did": did, "handle": handle, "displayName": handle.split(".")[0].title()},
        "record": {
            "$type": "app.bsky.feed.post",
            "text": text if text is not None else f"post {rkey}",
            "createdAt": "2026-01-26T10:00:00Z",
        },
        "indexedAt": "2026-01-26T10:00:01Z",
        "replyCount": 0,
        "repostCount": 0,
        "likeCount": 0,
    }


def make_node(rkey: str, parent: dict | None = None, replies: list | None = None, **post_kwargs) -> dict:
    node = {"$type": THREAD_VIEW_POST, "post": make_post(rkey, **post_kwargs)}
    if parent is not None:
        node["parent"] = parent
    if replies is not None:
        node["replies"] = replies
    return node


def make_not_found(rkey: str) -> dict:
    return {"$type": NOT_FOUND_POST, "uri": f"at://{DID}/app.bsky.feed.post/{rkey}", "notFound": True}


def make_blocked(rkey: str) -> dict:
    return {
        "$type": BLOCKED_POST,
        "uri": f"at://{DID}/app.bsky.feed.post/{rkey}",
        "blocked": True,
        "author": {"did": "did:plc:mallory"},
    }


def make_malformed(rkey: str) -> dict:
    """Claims to be a threadViewPost but its post view has no cid/author."""
    return {
        "$type": THREAD_VIEW_POST,
        "post": {"uri": f"at://{DID}/app.bsky.feed.post/{rkey}", "record": {}},
    }


@pytest.fixture
def threads():
    """Builders for raw thread nodes."""
    return SimpleNamespace(
        post=make_post,
        node=make_node,
        not_found=make_not_found,
        blocked=make_blocked,
        malformed=make_malformed,
    )
