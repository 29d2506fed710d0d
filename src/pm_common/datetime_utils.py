"""UTC datetime utilities."""

import time
from datetime import datetime, timezone


def unix_now() -> int:
    """Current unix timestamp in whole seconds (the engine's clock)."""
    return int(time.time())


def unix_to_iso(ts: int) -> str | None:
    """ISO-8601 UTC rendering; None when ts is beyond what datetime can hold."""
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None
