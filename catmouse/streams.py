from __future__ import annotations

import json
from typing import cast

import redis

EVENTS_STREAM_KEY = "catmouse:events"

# Approximate cap on the events stream length (XADD MAXLEN ~).
EVENTS_STREAM_MAXLEN = 10_000


def publish_to_stream(
    *,
    r: redis.Redis,
    fields: dict[str, object],
    key: str = EVENTS_STREAM_KEY,
    maxlen: int = EVENTS_STREAM_MAXLEN,
) -> str:
    """Append an entry to a stream. Non-string values are stored as JSON."""

    flat = {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in fields.items()}
    stream_id = r.xadd(key, flat, maxlen=maxlen, approximate=True)
    return cast(str, stream_id)


def read_stream(
    *,
    r: redis.Redis,
    key: str = EVENTS_STREAM_KEY,
    start: str = "-",
    end: str = "+",
    count: int = 20,
) -> list[dict[str, object]]:
    entries = r.xrange(key, min=start, max=end, count=count)
    return [{"id": mid, "fields": fields} for mid, fields in entries]
