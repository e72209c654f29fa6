from __future__ import annotations

import json

POST_COLLECTION = "app.bsky.feed.post"


def is_did(identifier: str) -> bool:
    return identifier.startswith("did:")


def build_post_uri(did: str, rkey: str) -> str:
    return f"at://{did}/{POST_COLLECTION}/{rkey}"


def dump_json(data: object) -> str:
    return json.dumps(data, ensure_ascii=True, separators=(",", ":"))
