# src/threadline/adapters/bsky/schemas.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

log = logging.getLogger(__name__)

THREAD_VIEW_POST = "app.bsky.feed.defs#threadViewPost"
NOT_FOUND_POST = "app.bsky.feed.defs#notFoundPost"
BLOCKED_POST = "app.bsky.feed.defs#blockedPost"


class ProfileViewBasic(BaseModel):
    """Author summary embedded in every post view."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    did: str
    handle: str
    display_name: str | None = Field(default=None, alias="displayName")
    avatar: str | None = None


class PostView(BaseModel):
    """
    Schema for app.bsky.feed.defs#postView.

    Only the fields a thread needs to be internally consistent are required;
    engagement counts and embeds pass through untouched.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uri: str
    cid: str
    author: ProfileViewBasic
    record: dict
    indexed_at: str = Field(alias="indexedAt")  # ISO8601
    reply_count: int | None = Field(default=None, alias="replyCount")
    repost_count: int | None = Field(default=None, alias="repostCount")
    like_count: int | None = Field(default=None, alias="likeCount")

    @field_validator("uri")
    @classmethod
    def _uri_is_at_uri(cls, value: str) -> str:
        if not value.startswith("at://"):
            raise ValueError(f"post uri must be an at:// URI, got {value!r}")
        return value


class ThreadViewPost(BaseModel):
    """
    Schema for app.bsky.feed.defs#threadViewPost.

    Parent and replies are open unions (thread node, not-found or blocked
    placeholder), so only their container shape is checked here. Each
    node is validated on its own when a traversal reaches it.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    post: PostView
    parent: dict | None = None
    replies: list[dict] | None = None


def is_thread_view_post(node: Any) -> bool:
    """Shape check: is this a full thread node rather than a placeholder."""
    return isinstance(node, Mapping) and node.get("$type") == THREAD_VIEW_POST


def validate_thread_view_post(node: Any) -> bool:
    """Structural validation of a node already known to be a thread view post."""
    try:
        ThreadViewPost.model_validate(dict(node))
    except (ValidationError, TypeError, ValueError) as exc:
        log.debug(f"threadViewPost failed validation: {exc}")
        return False
    return True


class BskyThreadInspector:
    """ThreadInspector backed by the app.bsky.feed lexicon schemas."""

    def is_full_thread_node(self, node: Any) -> bool:
        return is_thread_view_post(node)

    def validate(self, node: Any) -> bool:
        return validate_thread_view_post(node)
