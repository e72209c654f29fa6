"""Bluesky AppView adapter: HTTP client and thread lexicon schemas."""

from .client import AppViewClient
from .schemas import BskyThreadInspector, is_thread_view_post, validate_thread_view_post

__all__ = ["AppViewClient", "BskyThreadInspector", "is_thread_view_post", "validate_thread_view_post"]
