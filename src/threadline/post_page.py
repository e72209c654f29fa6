"""Post page controller: load a thread, keep it fresh, anchor the scroll."""
from __future__ import annotations

import logging
import threading
import weakref
from typing import Callable, Protocol

from .adapters.bsky.client import AppViewClient
from .errors import ThreadlineError
from .flatten import FlattenResult, ThreadInspector, flatten
from .util import build_post_uri, is_did

log = logging.getLogger(__name__)


class ScrollTarget(Protocol):
    """Anything that can bring a row of the flattened list into view."""

    def scroll_to_index(self, index: int, animated: bool = True) -> None:
        ...


def load_post_thread(
    client: AppViewClient,
    handle: str,
    post_id: str,
    inspector: ThreadInspector | None = None,
) -> FlattenResult:
    """
    Resolve the author, fetch the thread and flatten it.

    A handle that is already a DID skips resolution.

    Raises:
        NotFoundError: handle or post does not exist
        NetworkError: AppView unreachable or failing
        ThreadShapeError: the post came back as a placeholder
        ThreadIntegrityError: the thread failed validation
    """
    did = handle if is_did(handle) else client.resolve_handle(handle)
    uri = build_post_uri(did, post_id)
    log.info(f"Loading thread {uri}")
    thread = client.get_post_thread(uri)
    return flatten(thread, inspector)


class ScrollAnchor:
    """
    One-shot deferred scroll to the focal entry.

    The target is held weakly. Firing after cancel() or after the target
    has been garbage-collected does nothing.
    """

    def __init__(
        self,
        target: ScrollTarget,
        index: int,
        delay_seconds: float,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.index = index
        self._target_ref = weakref.ref(target)
        self._lock = threading.RLock()
        self._done = False
        self._timer = timer_factory(delay_seconds, self.fire)
        self._timer.daemon = True

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        # Waits for an in-flight fire() so no scroll lands after cancel returns
        with self._lock:
            self._done = True
        self._timer.cancel()

    def fire(self) -> None:
        with self._lock:
            if self._done:
                return
            self._done = True
            target = self._target_ref()
            if target is None:
                log.debug("Scroll target gone before anchor fired")
                return
            target.scroll_to_index(self.index, animated=True)


class PostPage:
    """
    State for a single post view.

    status is "loading" until the first load finishes, then "success" or
    "error". Every refresh recomputes the flattened thread from scratch. The
    scroll to the focal post is scheduled once, after the first success.
    """

    def __init__(
        self,
        client: AppViewClient,
        handle: str,
        post_id: str,
        view: ScrollTarget | None = None,
        scroll_delay_ms: int = 500,
        inspector: ThreadInspector | None = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.client = client
        self.handle = handle
        self.post_id = post_id
        self.view = view
        self.scroll_delay_ms = scroll_delay_ms
        self.inspector = inspector
        self._timer_factory = timer_factory

        self.status = "loading"
        self.result: FlattenResult | None = None
        self.error: ThreadlineError | None = None
        self.refreshing = False
        self.anchor: ScrollAnchor | None = None
        self._has_scrolled = False

    @property
    def error_message(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or "An error occurred"

    def load(self) -> FlattenResult | None:
        """Fetch and flatten; failures are kept on the page rather than raised."""
        try:
            result = load_post_thread(self.client, self.handle, self.post_id, self.inspector)
        except ThreadlineError as exc:
            log.warning(f"Failed to load {self.handle}/{self.post_id}: {exc}")
            self.status = "error"
            self.error = exc
            return None

        self.status = "success"
        self.result = result
        self.error = None
        self._schedule_scroll(result.anchor_index)
        return result

    def refresh(self) -> FlattenResult | None:
        self.refreshing = True
        try:
            return self.load()
        finally:
            self.refreshing = False

    def close(self) -> None:
        if self.anchor is not None:
            self.anchor.cancel()
        self.view = None

    def _schedule_scroll(self, index: int) -> None:
        if self._has_scrolled or self.view is None:
            return
        self._has_scrolled = True
        self.anchor = ScrollAnchor(self.view, index, self.scroll_delay_ms / 1000, self._timer_factory)
        self.anchor.start()
