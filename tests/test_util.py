import queue
import re
import time
from datetime import datetime, timedelta, timezone

import pytest

from raftkit.util import (
    async_notify,
    async_notify_bool,
    backoff,
    capped_exponential_backoff,
    decode_msgpack,
    drain_notify,
    encode_msgpack,
    generate_uuid,
    maximum,
    minimum,
    new_seed,
    override_notify_bool,
    random_timeout,
)

MS = timedelta(milliseconds=1)


def test_msgpack_encode_time_default_format():
    stamp = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)
    expected = bytes([175, 1, 0, 0, 0, 14, 187, 75, 55, 229, 0, 0, 0, 0, 255, 255])
    assert encode_msgpack(stamp) == expected


def test_msgpack_round_trip():
    value = {"name": "node", "term": 7, "peers": ["a", "b"], "ok": True}
    assert decode_msgpack(encode_msgpack(value)) == value


def test_msgpack_bytes_are_raw_strings():
    assert encode_msgpack(b"ab") == bytes([0xA2, 0x61, 0x62])


def test_decode_msgpack_empty_raises():
    with pytest.raises(ValueError):
        decode_msgpack(b"")


def test_encode_msgpack_unsupported_type():
    with pytest.raises(TypeError):
        encode_msgpack(object())


def test_random_timeout_fires_not_early():
    start = time.monotonic()
    event = random_timeout(0.02)
    assert event.wait(2.0)
    assert time.monotonic() - start >= 0.02


def test_random_timeout_accepts_timedelta():
    event = random_timeout(10 * MS)
    assert event.wait(2.0)


def test_random_timeout_not_immediate():
    event = random_timeout(0.5)
    assert not event.is_set()


def test_new_seed_unique():
    seeds = {new_seed() for _ in range(1000)}
    assert len(seeds) == 1000
    assert all(0 <= s < 2**63 - 1 for s in seeds)


def test_random_timeout_no_time():
    assert random_timeout(0) is None


@pytest.mark.parametrize("a,b,expected", [(1, 1, 1), (2, 1, 1), (1, 2, 1)])
def test_min(a, b, expected):
    assert minimum(a, b) == expected


@pytest.mark.parametrize("a,b,expected", [(1, 1, 1), (2, 1, 2), (1, 2, 2)])
def test_max(a, b, expected):
    assert maximum(a, b) == expected


def test_generate_uuid():
    pattern = re.compile(r"^[\da-f]{8}-[\da-f]{4}-[\da-f]{4}-[\da-f]{4}-[\da-f]{12}$")
    prev = generate_uuid()
    for _ in range(100):
        ident = generate_uuid()
        assert ident != prev
        assert pattern.match(ident)
        prev = ident


@pytest.mark.parametrize(
    "base,rnd,limit,expected",
    [
        (10 * MS, 1, 8, 10 * MS),
        (20 * MS, 2, 8, 20 * MS),
        (10 * MS, 8, 8, 640 * MS),
        (10 * MS, 9, 8, 640 * MS),
    ],
)
def test_backoff(base, rnd, limit, expected):
    assert backoff(base, rnd, limit) == expected


@pytest.mark.parametrize(
    "base,rnd,limit,cap,expected",
    [
        (10 * MS, 1, 8, 100 * MS, 10 * MS),
        (10 * MS, 4, 8, 100 * MS, 40 * MS),
        (10 * MS, 8, 8, 100 * MS, 100 * MS),
        (200 * MS, 1, 8, 100 * MS, 100 * MS),
    ],
)
def test_capped_exponential_backoff(base, rnd, limit, cap, expected):
    assert capped_exponential_backoff(base, rnd, limit, cap) == expected


def test_override_notify_bool():
    ch = queue.Queue(maxsize=1)
    assert ch.empty()

    override_notify_bool(ch, False)
    assert ch.get_nowait() is False

    for _ in range(4):
        override_notify_bool(ch, False)
    override_notify_bool(ch, True)
    assert ch.get_nowait() is True

    with pytest.raises(queue.Empty):
        ch.get_nowait()


def test_async_notify_does_not_block_and_drains():
    ch = queue.Queue(maxsize=1)
    async_notify(ch)
    async_notify(ch)
    assert ch.qsize() == 1
    assert drain_notify(ch) is True
    assert drain_notify(ch) is False


def test_async_notify_bool_keeps_first_value():
    ch = queue.Queue(maxsize=1)
    async_notify_bool(ch, True)
    async_notify_bool(ch, False)
    assert ch.get_nowait() is True
    assert ch.empty()