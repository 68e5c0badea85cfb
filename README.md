# raftflow

Building blocks for the leader side of a Raft replication loop:

- `raftflow.inflights.Inflights` is a bounded sliding window of append
  messages that have been sent to a follower and not yet acknowledged. It
  limits the number of messages and, if you ask it to, their total byte size.
- `raftflow.progress.Progress` is a follower's replication state as the
  leader sees it. It moves between `StateType.PROBE`, `StateType.REPLICATE`
  and `StateType.SNAPSHOT`. `raftflow.progress.ProgressMap` is a dict from
  node ids to progresses that prints them in id order, one per line.
- `raftflow.entries` defines plain data types: `Entry`, `Message`,
  `HardState`, `ConfState`, `SnapshotMetadata` and `Snapshot`, with the
  `MessageType` and `EntryType` enums. It also has functions that classify
  message types (`is_local_msg`, `is_response_msg`, `vote_resp_msg_type`),
  format entries, messages and states for debugging, and cap a batch of
  entries at a byte budget (`limit_size`, `ents_size`, `payload_size`).

The package needs nothing outside the standard library.

## Installation

```
pip install raftflow
```

## Flow control with `Inflights`

```python
from raftflow.inflights import Inflights

window = Inflights(4, 1024)   # at most 4 messages, about 1 KiB in flight
window.add(10, 300)           # last index of the message, its byte size
window.add(11, 300)
window.full()                 # False
window.free_le(10)            # follower acknowledged up to index 10
window.count()                # 1
list(window)                  # [(11, 300)]
```

The byte limit is soft. A single message may take the total from below
`max_bytes` to `max_bytes` or above. A `max_bytes` of 0 means there is no
byte limit. Adding to a full window raises `RuntimeError`, so call `full()`
first. `clone()` returns an independent copy and `reset()` empties the
window.

## Tracking a follower with `Progress`

```python
from raftflow.inflights import Inflights
from raftflow.progress import Progress, StateType

pr = Progress(match=0, next=1, inflights=Inflights(256, 0))
pr.become_replicate()
pr.update_on_entries_send(3, 120, pr.next)  # three entries sent, 120 bytes
pr.maybe_update(3)                          # follower acked index 3 -> True
pr.is_paused()                              # False
str(pr)                                     # 'StateReplicate match=3 next=4 inactive inflight=1'
```

`maybe_decr_to(rejected, match_hint)` handles a rejected append. It returns
`False` when the rejection is stale and leaves the progress unchanged.
`update_on_entries_send` raises `ValueError` in snapshot state. A progress in
snapshot state is always paused.

## Describing entries and messages

```python
from raftflow.entries import Entry, EntryType, Message, MessageType
from raftflow.entries import describe_entry, describe_message, limit_size

e = Entry(term=1, index=2, type=EntryType.EntryNormal, data=b"hello")
describe_entry(e, None)                          # '1/2 EntryNormal "hello"'
describe_entry(e, lambda d: d.decode().upper())  # '1/2 EntryNormal HELLO'

m = Message(type=MessageType.MsgApp, from_=1, to=2, term=3, entries=[e])
describe_message(m, None)  # '1->2 MsgApp Term:3 Log:0/0 Entries:[1/2 EntryNormal "hello"]'

batch = limit_size([e, e, e], 0)                 # always keeps the first entry
```

Node ids are printed in hexadecimal. `NONE`, `LOCAL_APPEND_THREAD` and
`LOCAL_APPLY_THREAD` are printed as `None`, `AppendThread` and `ApplyThread`.

## What this package does not do

It is a set of parts, not a Raft node. There is no election or log
replication state machine, no log storage, no network transport and no
tracking of voter quorums or joint configurations. Entry data is never
decoded: configuration-change entries are described by passing their bytes
to the formatter like any other entry. `Entry.size()` computes the byte size
of the entry's wire encoding, but the package has no encoder or decoder.

## Running the tests

```
pip install -e .[test]
pytest
```