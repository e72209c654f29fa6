# src/threadline/adapters/bsky/client.py
from __future__ import annotations

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from threadline.errors import NetworkError, NotFoundError

log = logging.getLogger(__name__)

RESOLVE_HANDLE = "com.atproto.identity.resolveHandle"
GET_POST_THREAD = "app.bsky.feed.getPostThread"


def _make_session() -> requests.Session:
    """Session with connection pooling; retries only idempotent GETs on gateway errors."""
    s = requests.Session()
    retry = Retry(total=2, backoff_factor=0.3, status_forcelist=(502, 503, 504), allowed_methods=("GET",))
    s.mount("http://", HTTPAdapter(max_retries=retry))
    s.mount("https://", HTTPAdapter(max_retries=retry))
    return s


class AppViewClient:
    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = _make_session()

    def health_check(self) -> tuple[bool, str]:
        """
        Check if the AppView is reachable.

        Returns:
            (success, message) tuple with detailed error info
        """
        try:
            resp = self.session.get(f"{self.base_url}/xrpc/_health", timeout=5)
            if resp.status_code == 200:
                return (True, "AppView reachable")
            return (False, f"Unexpected status: {resp.status_code}")
        except requests.ConnectionError:
            return (False, f"Connection refused. Is the AppView reachable at {self.base_url}?")
        except requests.Timeout:
            return (False, "Timeout connecting to AppView")
        except requests.RequestException as e:
            return (False, f"Unexpected error: {e}")

    def _xrpc_get(self, method: str, params: dict[str, Any]) -> dict:
        url = f"{self.base_url}/xrpc/{method}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error(f"{method} request failed: {exc}")
            raise NetworkError(f"Could not reach {self.base_url}: {exc}") from exc

        # The AppView answers unknown handles and deleted posts with 400
        if response.status_code in (400, 404):
            detail = _error_message(response)
            log.info(f"{method} not found: {detail}")
            raise NotFoundError(detail)
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise NetworkError(f"{method} failed with status {response.status_code}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(f"{method} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise NetworkError(f"{method} returned {type(data).__name__}, expected a JSON object")
        return data

    def resolve_handle(self, handle: str) -> str:
        """Resolve a handle to its DID via com.atproto.identity.resolveHandle."""
        data = self._xrpc_get(RESOLVE_HANDLE, {"handle": handle})
        did = data.get("did")
        if not did:
            raise NotFoundError(f"Handle could not be resolved: {handle}")
        return did

    def get_post_thread(self, uri: str, depth: int | None = None, parent_height: int | None = None) -> Any:
        """
        Fetch the thread around a post from app.bsky.feed.getPostThread.

        Returns the raw thread node (a threadViewPost, or a placeholder when
        the post is missing or blocked).
        """
        params: dict[str, Any] = {"uri": uri}
        if depth is not None:
            params["depth"] = depth
        if parent_height is not None:
            params["parentHeight"] = parent_height
        data = self._xrpc_get(GET_POST_THREAD, params)
        return data.get("thread")


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Not found"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or "Not found"
    return "Not found"
