# quorumkit

Building blocks for a replicated, consensus-driven cluster. The package has
no third-party dependencies.

| Module | What it holds |
| --- | --- |
| `quorumkit.types` | `RawMember`, `MemberType`, `Message`, `MessageType`, `SnapshotStatus`, `MembershipConfig`, and the abstract `Member`, `Reporter` and `Client` interfaces |
| `quorumkit.local` | `LocalMember`, the member that stands for this node |
| `quorumkit.remote` | `RemoteMember`, a peer reached through a `Client` |
| `quorumkit.removed` | `RemovedMember` and `RemovedMemberError` |
| `quorumkit.pool` | `Pool`, a thread-safe set of members keyed by id |
| `quorumkit.msgbus` | `MsgBus` and `Subscription`, a one-to-many event bus |
| `quorumkit.controller` | `Controller`, `Router`, `JoinResponse` and `UnknownGroupError` |
| `quorumkit.atomic` | `AtomicBool` and `AtomicUint64` |
| `quorumkit.kvstore` | `KVStateMachine`, `MultiGroupStateMachine`, `encode_entry` and `encode_replicate` |

## Installation

```
pip install quorumkit
```

## Members and the pool

The `Pool` builds each member from a `RawMember` according to its type:

- `VOTER`, `LEARNER` and `STAGING` members become a `RemoteMember`.
- `REMOVED` members become a `RemovedMember`.
- `LOCAL` becomes a `LocalMember`.

A different rule can be set with `register_type_matcher`.

```python
from quorumkit.pool import Pool
from quorumkit.types import MembershipConfig, MemberType, RawMember

pool = Pool(MembershipConfig())
pool.add(RawMember(id=1, address=":5050", type=MemberType.LOCAL))
print(pool.get(1).address())           # ":5050"

snapshot = pool.snapshot()             # list of RawMember
pool.remove(RawMember(id=1, type=MemberType.REMOVED))
pool.purge()                           # forget removed members
pool.tear_down(timeout=5.0)
```

Some calls merge with others or behave in ways worth knowing:

- `add` on a known id updates the member, and `update` on an unknown id adds it.
- `get` returns `None` for an unknown id.
- `remove` raises `LookupError` for an unknown id. It does nothing if the member already has the given type.
- `restore` adds every member in a list. It logs failures and moves on.
- `next_id()` returns a random positive id that no current member uses.
- `tear_down` tears every member down concurrently and empties the pool. It raises the first error that any member raised.

### Remote members

A `RemoteMember` connects through `MembershipConfig.dial`, a callable that
takes an address and returns a `Client`. Messages given to `send` are
queued and delivered by worker threads:

- By default there is 1 worker and a 4096-message buffer.
- With `allow_pipelining=True` there are 4 workers and a 64-message buffer.

`send` raises `BufferError` when the buffer is full. It raises
`ConnectionAbortedError` once the member is stopped, or once
`MembershipConfig.stopped` is set.

Outcomes are reported to `MembershipConfig.reporter`:

- A snapshot message that is delivered reports `SnapshotStatus.FINISH`.
- A snapshot message that fails reports `SnapshotStatus.FAILURE`.
- Any other failed message reports the member as unreachable.

The member is active while deliveries succeed and inactive after a failure.

`update` with a new address dials the new address first and then closes
the old client. `close` and `tear_down` stop the workers, deliver what is
still queued within the drain timeout, and close the client.

### Local and removed members

- `LocalMember.send` always raises `RuntimeError`.
- `LocalMember.close` reports a shutdown to the reporter.
- `RemovedMember.send` and `RemovedMember.update` raise `RemovedMemberError`.
- A `RemovedMember` is never active.

## Message bus

```python
from quorumkit.msgbus import MsgBus

with MsgBus() as bus:
    sub = bus.subscribe(1)
    bus.broadcast(1, "hello")
    print(sub.get(timeout=0.5))       # "hello"
    sub.unsubscribe()
```

There are three kinds of subscription:

- `subscribe` buffers one value.
- `subscribe_buffered(event_id, size)` buffers `size` values.
- `subscribe_once` takes a single value and then unsubscribes itself.

`broadcast` delivers in a background thread. `broadcast_to_all` sends a
value to the subscribers of every event.

`Subscription.get` raises `queue.Empty` when no value arrives in time. Once
the bus is closed, `get` still returns values that were already buffered,
then raises `queue.Empty`.

## Routing requests by group

A `Controller` serves peer requests for one node: `join`, `push`,
`promote_member`, `snapshot_writer` and `snapshot_reader`. It works on
objects that you supply:

- `node`, with `get_member`, `add_member`, `update_member` and `promote_member`.
- `engine`, with `push`.
- `pool`, with `snapshot`.
- `storage`, with `snapshotter()` returning an object with `writer` and `reader`.

`join` adds the member, or updates it if `node.get_member` finds it. It
then returns a `JoinResponse` with the member's id and the pool snapshot.

A `Router` keeps one controller per group id and forwards each request to
it. A group id that is not registered raises `UnknownGroupError`, which is
a `LookupError`.

```python
from quorumkit.controller import Router, UnknownGroupError

router = Router()
try:
    router.push(7, message)
except UnknownGroupError as exc:
    print(exc)                         # "raft: unknown group id 7"
```

## Key-value state machine

```python
from quorumkit.kvstore import KVStateMachine, encode_entry

fsm = KVStateMachine()
fsm.apply(encode_entry("name", "value"))
print(fsm.read("name"))               # "value"; unset keys read as ""

other = KVStateMachine()
other.restore(fsm.snapshot())         # merges the snapshot, then closes it
```

`apply` logs data it cannot decode and ignores it. Field names in applied
JSON are matched case-insensitively.

`MultiGroupStateMachine(whoami, on_create_group)` applies command
envelopes built with `encode_replicate(cmd, data)`:

- A `"kv"` command stores an entry.
- A `"group"` command carries `GroupID`, `IDs` and `JoinAddr`. It calls
  `on_create_group(group_id, join_addr)` when `whoami()` is among the `IDs`.

## Atomics

- `AtomicBool` has `set`, `unset`, `is_true` and `is_false`. It can be used in a boolean context, and its `str()` is `"true"` or `"false"`.
- `AtomicUint64` has `set` and `get`. `set` raises `ValueError` for values outside the unsigned 64-bit range.

## What this package does not do

quorumkit provides parts of a cluster, not a running one. It does not
include any of the following:

- a consensus engine
- a network transport or server
- persistent storage for logs and snapshots
- a command-line program

The `Controller` takes the node, engine, pool and storage from the caller.
`RemoteMember` delivers messages only through a `Client` supplied by the
configured `dial` function.

## Running the tests

```
pip install -e ".[test]"
pytest
```