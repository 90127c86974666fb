# raftkit

Small building blocks for implementing the Raft consensus protocol:
randomized election timeouts, exponential backoff, non-blocking
notification queues, random identifiers and msgpack encoding.

## Installation

```
pip install raftkit
```

## Usage

All helpers live in `raftkit.util`.

### Timeouts and backoff

Durations are given in seconds (int or float) or as `datetime.timedelta`.

```python
from raftkit.util import random_timeout, backoff, capped_exponential_backoff

# A threading.Event that becomes set somewhere between 0.15 and 0.3
# seconds from now. A zero minimum returns None: the timeout never fires.
fired = random_timeout(0.15)
fired.wait()

# Exponential backoff: the base doubles for every round past the second,
# counting at most `limit` rounds.
backoff(0.01, 8, 8)                            # 0.64 (approximately)
capped_exponential_backoff(0.01, 8, 8, 0.1)    # 0.1, never more than the cap
```

### Notification queues

Single-slot `queue.Queue(maxsize=1)` objects serve as wake-up signals that
never block the sender.

```python
import queue
from raftkit.util import (
    async_notify, drain_notify, async_notify_bool, override_notify_bool,
)

wake = queue.Queue(maxsize=1)
async_notify(wake)       # puts a signal, or does nothing if one is pending
drain_notify(wake)       # True: a signal was waiting
drain_notify(wake)       # False: nothing left

flag = queue.Queue(maxsize=1)
async_notify_bool(flag, True)    # dropped silently if the queue is full

leader = queue.Queue(maxsize=1)
override_notify_bool(leader, False)
override_notify_bool(leader, True)
leader.get_nowait()      # True: only the latest value is kept
```

`override_notify_bool` is not meant for several concurrent callers on the
same queue; if another sender fills the slot between its take and its put it
raises `RuntimeError`.

### Identifiers and seeds

```python
from raftkit.util import generate_uuid, new_seed

generate_uuid()   # 32 random hex digits in the 8-4-4-4-12 layout
new_seed()        # a cryptographically random integer in [0, 2**63 - 1)
```

### Encoding

```python
from datetime import datetime, timezone
from raftkit.util import encode_msgpack, decode_msgpack

data = encode_msgpack({"term": 3, "index": 42})
decode_msgpack(data)     # {'term': 3, 'index': 42}

encode_msgpack(datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc))
```

`encode_msgpack` writes bytes and strings as msgpack raw strings and
`datetime` values in a fixed 15- or 16-byte binary layout (version,
seconds, nanoseconds, zone offset); naive datetimes are taken as UTC. Other
unsupported types raise `TypeError`. `decode_msgpack` returns the first
value in the buffer, with raw strings decoded as text, and raises
`ValueError` on empty or truncated input.

### Comparisons

`minimum(a, b)` and `maximum(a, b)` return the smaller and larger of two
values.

## What this package does not do

raftkit holds helpers only. It has no consensus engine, no leader election
or log replication, no network transport, no log or snapshot storage and no
command-line program.

## Running the tests

```
pip install -e .[test]
pytest
```