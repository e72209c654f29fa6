"""threadline: flatten Bluesky post threads into a scroll-anchored list."""

__version__ = "0.1.0"
