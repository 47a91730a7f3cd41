from __future__ import annotations

import uuid


def new_id(prefix: str = "") -> str:
    """Return a random identifier, optionally prefixed (``local-3f2a...``)."""
    value = uuid.uuid4().hex
    return f"{prefix}-{value}" if prefix else value
