"""Id and clock providers injected into the session manager."""

from __future__ import annotations

import random
import time
import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """Return a fresh conversation id.

    Uses a random UUID; platforms without an entropy source get a
    timestamp plus random suffix, which is unique enough for local ids.
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # os.urandom has no randomness source here
        return f"{int(time.time() * 1000):x}-{random.getrandbits(32):08x}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
