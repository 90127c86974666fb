"""Small helpers shared across the consensus code: timing, notification and encoding."""

from __future__ import annotations

import os
import queue
import random
import secrets
import struct
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

import msgpack

_MAX_INT64 = (1 << 63) - 1
_EPOCH = datetime(1, 1, 1)
_TIME_FORMAT_V1 = 1
_TIME_FORMAT_V2 = 2

Duration = TypeVar("Duration", int, float, timedelta)


def new_seed() -> int:
    """Return a non-negative integer below 2**63 - 1 from a cryptographic source."""
    return secrets.randbelow(_MAX_INT64)


_rng = random.Random(new_seed())


def _as_seconds(duration: float | timedelta) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


def random_timeout(min_val: float | timedelta) -> threading.Event | None:
    """Return an event that becomes set after between min_val and 2x min_val.

    Durations are seconds or a timedelta. A zero duration yields None,
    meaning the timeout never fires.
    """
    seconds = _as_seconds(min_val)
    if seconds == 0:
        return None
    extra = _rng.random() * seconds
    fired = threading.Event()
    timer = threading.Timer(seconds + extra, fired.set)
    timer.daemon = True
    timer.start()
    return fired


def minimum(a: int, b: int) -> int:
    """Return the smaller of two values."""
    return a if a <= b else b


def maximum(a: int, b: int) -> int:
    """Return the larger of two values."""
    return a if a >= b else b


def generate_uuid() -> str:
    """Return a random identifier in the 8-4-4-4-12 hex layout."""
    raw = os.urandom(16).hex()
    return f"{raw[0:8]}-{raw[8:12]}-{raw[12:16]}-{raw[16:20]}-{raw[20:32]}"


def async_notify(ch: queue.Queue) -> None:
    """Put a notification on ch unless it is already full."""
    try:
        ch.put_nowait(None)
    except queue.Full:
        pass


def drain_notify(ch: queue.Queue) -> bool:
    """Take a pending notification off ch without blocking; report whether there was one."""
    try:
        ch.get_nowait()
    except queue.Empty:
        return False
    return True


def async_notify_bool(ch: queue.Queue, value: bool) -> None:
    """Put value on ch unless it is already full."""
    try:
        ch.put_nowait(value)
    except queue.Full:
        pass


def override_notify_bool(ch: queue.Queue, value: bool) -> None:
    """Put value on a one-slot queue, replacing any value already waiting there.

    Not safe for several concurrent callers on the same queue.
    """
    try:
        ch.put_nowait(value)
        return
    except queue.Full:
        pass
    try:
        ch.get_nowait()
    except queue.Empty:
        pass
    try:
        ch.put_nowait(value)
    except queue.Full:
        raise RuntimeError("race: channel was sent concurrently") from None


def _encode_time(value: datetime) -> bytes:
    """Encode a datetime in the fixed binary time layout (version, seconds, nanos, offset)."""
    if value.tzinfo is None:
        aware = value.replace(tzinfo=timezone.utc)
    else:
        aware = value
    instant = aware.astimezone(timezone.utc).replace(tzinfo=None)
    delta = instant - _EPOCH
    seconds = delta.days * 86400 + delta.seconds
    nanos = delta.microseconds * 1000

    if aware.tzinfo is timezone.utc:
        offset_minutes, offset_seconds = -1, 0
    else:
        utcoffset = aware.utcoffset() or timedelta(0)
        total = int(utcoffset.total_seconds())
        offset_minutes, offset_seconds = divmod(total, 60)
        if not -32768 <= offset_minutes <= 32767 or offset_minutes == -1:
            raise ValueError("unexpected zone offset")

    if offset_seconds:
        return struct.pack(
            ">bqihb", _TIME_FORMAT_V2, seconds, nanos, offset_minutes, offset_seconds
        )
    return struct.pack(">bqih", _TIME_FORMAT_V1, seconds, nanos, offset_minutes)


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return _encode_time(value)
    raise TypeError(f"cannot encode object of type {type(value).__name__}")


def encode_msgpack(value: Any) -> bytes:
    """Encode value as msgpack, writing bytes as raw strings and times in binary layout."""
    return msgpack.packb(value, use_bin_type=False, default=_default)


def decode_msgpack(buf: bytes) -> Any:
    """Decode the first msgpack value in buf; raw strings come back as text."""
    unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
    unpacker.feed(buf)
    try:
        return next(unpacker)
    except StopIteration:
        raise ValueError("unexpected end of msgpack data") from None


def backoff(base: Duration, rnd: int, limit: int) -> Duration:
    """Scale base by two for each round past the second, up to limit rounds."""
    power = minimum(rnd, limit)
    return base * (2 ** max(power - 2, 0))


def capped_exponential_backoff(base: Duration, rnd: int, limit: int, cap: Duration) -> Duration:
    """Exponential backoff as in backoff(), never exceeding cap."""
    power = minimum(rnd, limit)
    while power > 2:
        if base > cap:
            return cap
        base = base * 2
        power -= 1
    return cap if base > cap else base