"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from threadline.gateway import __version__

router = APIRouter()

# Module-level state set during startup
_gateway_state = {
    "service_url": None,
    "startup_time": None
}


def set_gateway_state(service_url: str):
    """Set gateway state during startup. Called from create_app."""
    _gateway_state["service_url"] = service_url
    _gateway_state["startup_time"] = datetime.now(timezone.utc)


def get_gateway_state() -> dict:
    """Get current gateway state for testing."""
    return _gateway_state.copy()


@router.get("/health")
def health(request: Request):
    """
    Health check endpoint.

    Returns:
        Status, version, uptime and whether the upstream AppView answers
    """
    appview_ok, appview_message = request.app.state.client.health_check()

    uptime_seconds = 0
    if _gateway_state["startup_time"]:
        uptime_seconds = int((datetime.now(timezone.utc) - _gateway_state["startup_time"]).total_seconds())

    return {
        "status": "ok",
        "version": __version__,
        "service_url": _gateway_state["service_url"],
        "appview": {"ok": appview_ok, "message": appview_message},
        "uptime_seconds": uptime_seconds,
    }
