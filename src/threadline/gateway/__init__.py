"""HTTP gateway exposing flattened threads."""

from threadline import __version__

__all__ = ["__version__"]
