from __future__ import annotations


class ThreadlineError(Exception):
    pass


class ThreadError(ThreadlineError):
    """Base for failures raised while flattening a thread."""


class ThreadShapeError(ThreadError):
    """The focal node is a placeholder (not found, blocked) rather than a post."""

    def __init__(self, message: str = "Post not found") -> None:
        super().__init__(message)


class ThreadIntegrityError(ThreadError):
    """A node that looked like a full thread node failed validation."""

    def __init__(self, message: str, uri: str | None = None) -> None:
        super().__init__(message)
        self.uri = uri


class NotFoundError(ThreadlineError):
    pass


class NetworkError(ThreadlineError):
    pass
