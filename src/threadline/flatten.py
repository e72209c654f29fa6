"""Flatten a post thread into a single scroll-anchored list.

A thread arrives as a focal node with a chain of parents above it and a tree
of replies below it. The flattened form is:

    ancestors (oldest first) + [focal] + replies

Only the first child is followed below each top-level reply, so the result is
always a strict linear list. Placeholder nodes (not found, blocked) truncate
the branch they sit on; nodes that claim to be posts but fail validation
abort the whole call.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from prometheus_client import Counter

from .errors import ThreadIntegrityError, ThreadShapeError

log = logging.getLogger(__name__)

THREADS_FLATTENED = Counter(
    "threadline_flatten_total",
    "Total thread flatten calls",
    ["outcome"]
)

ThreadNode = Mapping[str, Any]


class ThreadInspector(Protocol):
    """Protocol for the shape check and structural validation of a node."""

    def is_full_thread_node(self, node: Any) -> bool:
        ...

    def validate(self, node: Any) -> bool:
        ...


class EntryRole(str, Enum):
    ANCESTOR = "ancestor"
    FOCAL = "focal"
    REPLY = "reply"


@dataclass(frozen=True)
class FlatEntry:
    post: Any
    role: EntryRole
    has_parent: bool = False
    has_reply: bool = False

    @property
    def item_type(self) -> str:
        """List recycling hint: the focal post renders large."""
        return "big" if self.role is EntryRole.FOCAL else "small"

    def to_dict(self) -> dict:
        return {
            "post": self.post,
            "role": self.role.value,
            "has_parent": self.has_parent,
            "has_reply": self.has_reply,
        }


@dataclass(frozen=True)
class FlattenResult:
    entries: tuple[FlatEntry, ...]
    anchor_index: int

    @property
    def focal(self) -> FlatEntry:
        return self.entries[self.anchor_index]

    def is_reply(self, index: int) -> bool:
        """Whether the row at index continues the row above it."""
        if index <= 0:
            return False
        return self.entries[index - 1].has_reply

    def to_dict(self) -> dict:
        return {
            "anchor_index": self.anchor_index,
            "entries": [entry.to_dict() for entry in self.entries],
        }


def _default_inspector() -> ThreadInspector:
    from .adapters.bsky.schemas import BskyThreadInspector
    return BskyThreadInspector()


def _post_uri(node: ThreadNode) -> str | None:
    post = node.get("post")
    if isinstance(post, Mapping):
        return post.get("uri")
    return None


def _check_integrity(node: ThreadNode, inspector: ThreadInspector) -> None:
    if not inspector.validate(node):
        uri = _post_uri(node)
        log.warning(f"Thread node failed validation: {uri}")
        raise ThreadIntegrityError(f"Malformed thread node: {uri or '<unknown>'}", uri=uri)


def _first_reply(node: ThreadNode) -> Any | None:
    replies = node.get("replies")
    if replies:
        return replies[0]
    return None


def walk_ancestors(focal: ThreadNode, inspector: ThreadInspector) -> list[FlatEntry]:
    """
    Collect ancestor entries above the focal node, oldest first.

    Stops at the root or at the first parent that is a placeholder. Every
    ancestor has a reply by construction (the path down to the focal post).
    """
    ancestors: list[FlatEntry] = []
    node = focal
    while node.get("parent"):
        parent = node["parent"]
        if not inspector.is_full_thread_node(parent):
            log.debug(f"Ancestor walk stopped at placeholder above {_post_uri(node)}")
            break
        _check_integrity(parent, inspector)

        ancestors.append(FlatEntry(post=parent["post"], role=EntryRole.ANCESTOR, has_parent=False, has_reply=True))
        node = parent

    ancestors.reverse()
    return ancestors


def flatten_replies(replies: Sequence[Any] | None, inspector: ThreadInspector) -> list[FlatEntry]:
    """
    Flatten the replies to the focal post into one line per top-level reply.

    Every top-level reply is kept. Beneath each one only the first child is
    followed, level after level; later siblings are dropped.
    """
    entries: list[FlatEntry] = []
    for reply in replies or ():
        if not inspector.is_full_thread_node(reply):
            continue
        _check_integrity(reply, inspector)
        entries.append(FlatEntry(post=reply["post"], role=EntryRole.REPLY, has_reply=bool(reply.get("replies"))))

        child = _first_reply(reply)
        while child is not None:
            if not inspector.is_full_thread_node(child):
                log.debug(f"Reply chain under {_post_uri(reply)} stopped at placeholder")
                break
            _check_integrity(child, inspector)
            entries.append(FlatEntry(post=child["post"], role=EntryRole.REPLY, has_reply=bool(child.get("replies"))))
            child = _first_reply(child)

    return entries


def flatten(focal: ThreadNode, inspector: ThreadInspector | None = None) -> FlattenResult:
    """
    Flatten a thread around its focal node.

    Args:
        focal: Raw thread node the view is centered on
        inspector: Shape check and validation provider (defaults to the
            app.bsky.feed lexicon schemas)

    Returns:
        FlattenResult whose anchor_index points at the focal entry

    Raises:
        ThreadShapeError: focal node is not a full thread node
        ThreadIntegrityError: a full-looking node failed validation
    """
    inspector = inspector or _default_inspector()

    if not inspector.is_full_thread_node(focal):
        THREADS_FLATTENED.labels(outcome="shape_error").inc()
        raise ThreadShapeError()

    try:
        _check_integrity(focal, inspector)
        ancestors = walk_ancestors(focal, inspector)
        replies = flatten_replies(focal.get("replies"), inspector)
    except ThreadIntegrityError:
        THREADS_FLATTENED.labels(outcome="integrity_error").inc()
        raise

    focal_entry = FlatEntry(
        post=focal["post"],
        role=EntryRole.FOCAL,
        has_parent=focal.get("parent") is not None,
        has_reply=False,
    )

    THREADS_FLATTENED.labels(outcome="ok").inc()
    return FlattenResult(entries=(*ancestors, focal_entry, *replies), anchor_index=len(ancestors))
