"""Thread endpoint - flattened post thread with its scroll anchor."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from threadline.errors import NetworkError, NotFoundError, ThreadIntegrityError, ThreadShapeError
from threadline.post_page import load_post_thread

log = logging.getLogger(__name__)

router = APIRouter()


class EntryModel(BaseModel):
    """One row of the flattened thread."""
    post: Any
    role: str
    has_parent: bool
    has_reply: bool


class ThreadResponse(BaseModel):
    """Response from thread endpoint."""
    handle: str
    post_id: str
    anchor_index: int
    entries: list[EntryModel]


@router.get("/profile/{handle}/post/{post_id}", response_model=ThreadResponse)
def get_thread(handle: str, post_id: str, request: Request):
    """
    Flatten the thread around a post.

    Ancestors come first (oldest first), then the post itself at
    anchor_index, then one reply line per top-level reply.
    """
    client = request.app.state.client
    try:
        result = load_post_thread(client, handle, post_id)
    except (ThreadShapeError, NotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc) or "Post not found")
    except ThreadIntegrityError as exc:
        log.error(f"Malformed thread for {handle}/{post_id}: {exc}")
        raise HTTPException(status_code=502, detail="Upstream returned a malformed thread")
    except NetworkError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    data = result.to_dict()
    return ThreadResponse(
        handle=handle,
        post_id=post_id,
        anchor_index=data["anchor_index"],
        entries=[EntryModel(**entry) for entry in data["entries"]],
    )
