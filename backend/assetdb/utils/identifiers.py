from __future__ import annotations

import secrets
import time
import uuid


def generate_id() -> str:
    """
    Primary key default for every table: a UUIDv7 string (time-ordered).

    Layout:
    - 48-bit Unix timestamp in milliseconds
    - 4-bit version (0b0111)
    - 2-bit variant (0b10)
    - remaining bits random

    Time ordering keeps B-tree inserts local and lets "newest first" listings
    fall back on the id when timestamps collide.
    """
    ts_ms = time.time_ns() // 1_000_000
    raw = bytearray(ts_ms.to_bytes(6, "big", signed=False) + secrets.token_bytes(10))
    raw[6] = (raw[6] & 0x0F) | 0x70
    raw[8] = (raw[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(raw)))
