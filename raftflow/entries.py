"""Log entries, messages and the helpers that classify, size and describe them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Iterable, Optional, Sequence

NONE = 0
"""Placeholder node id used when there is no leader or target."""

LOCAL_APPEND_THREAD = 2**64 - 1
"""Target id of messages addressed to the local append (storage) thread."""

LOCAL_APPLY_THREAD = 2**64 - 2
"""Target id of messages addressed to the local apply thread."""

EntryFormatter = Callable[[bytes], str]


class MessageType(IntEnum):
    """Type of a message exchanged between nodes or with local threads."""

    MsgHup = 0
    MsgBeat = 1
    MsgProp = 2
    MsgApp = 3
    MsgAppResp = 4
    MsgVote = 5
    MsgVoteResp = 6
    MsgSnap = 7
    MsgHeartbeat = 8
    MsgHeartbeatResp = 9
    MsgUnreachable = 10
    MsgSnapStatus = 11
    MsgCheckQuorum = 12
    MsgTransferLeader = 13
    MsgTimeoutNow = 14
    MsgReadIndex = 15
    MsgReadIndexResp = 16
    MsgPreVote = 17
    MsgPreVoteResp = 18
    MsgStorageAppend = 19
    MsgStorageAppendResp = 20
    MsgStorageApply = 21
    MsgStorageApplyResp = 22

    def __str__(self) -> str:
        return self.name


class EntryType(IntEnum):
    """Type of a log entry."""

    EntryNormal = 0
    EntryConfChange = 1
    EntryConfChangeV2 = 2

    def __str__(self) -> str:
        return self.name


def _varint_size(value: int) -> int:
    """Number of bytes taken by ``value`` as a protobuf varint."""
    return max(1, (value.bit_length() + 6) // 7)


@dataclass
class Entry:
    """A single log entry."""

    term: int = 0
    index: int = 0
    type: EntryType = EntryType.EntryNormal
    data: Optional[bytes] = None

    def size(self) -> int:
        """Return the protocol buffer encoding size of the entry."""
        n = 1 + _varint_size(int(self.type))
        n += 1 + _varint_size(self.term)
        n += 1 + _varint_size(self.index)
        if self.data is not None:
            length = len(self.data)
            n += 1 + length + _varint_size(length)
        return n


@dataclass
class HardState:
    """Persistent state of a node: term, vote and commit index."""

    term: int = 0
    vote: int = 0
    commit: int = 0

    def is_empty(self) -> bool:
        return self == HardState()


@dataclass
class ConfState:
    """Membership configuration of the group."""

    voters: list[int] = field(default_factory=list)
    voters_outgoing: list[int] = field(default_factory=list)
    learners: list[int] = field(default_factory=list)
    learners_next: list[int] = field(default_factory=list)
    auto_leave: bool = False


@dataclass
class SnapshotMetadata:
    """Position and configuration captured by a snapshot."""

    conf_state: ConfState = field(default_factory=ConfState)
    index: int = 0
    term: int = 0


@dataclass
class Snapshot:
    """A snapshot of the state machine."""

    data: Optional[bytes] = None
    metadata: SnapshotMetadata = field(default_factory=SnapshotMetadata)

    def is_empty(self) -> bool:
        return self.metadata.index == 0


@dataclass
class Message:
    """A message between nodes, or between a node and its local threads."""

    type: MessageType = MessageType.MsgHup
    to: int = 0
    from_: int = 0
    term: int = 0
    log_term: int = 0
    index: int = 0
    entries: list[Entry] = field(default_factory=list)
    commit: int = 0
    vote: int = 0
    snapshot: Optional[Snapshot] = None
    reject: bool = False
    reject_hint: int = 0
    responses: list[Message] = field(default_factory=list)


_LOCAL_MSGS = frozenset(
    {
        MessageType.MsgHup,
        MessageType.MsgBeat,
        MessageType.MsgUnreachable,
        MessageType.MsgSnapStatus,
        MessageType.MsgCheckQuorum,
        MessageType.MsgStorageAppend,
        MessageType.MsgStorageAppendResp,
        MessageType.MsgStorageApply,
        MessageType.MsgStorageApplyResp,
    }
)

_RESPONSE_MSGS = frozenset(
    {
        MessageType.MsgAppResp,
        MessageType.MsgVoteResp,
        MessageType.MsgHeartbeatResp,
        MessageType.MsgUnreachable,
        MessageType.MsgReadIndexResp,
        MessageType.MsgPreVoteResp,
        MessageType.MsgStorageAppendResp,
        MessageType.MsgStorageApplyResp,
    }
)


def is_local_msg(msg_type: int) -> bool:
    """Return True for messages that never leave the local node."""
    return msg_type in _LOCAL_MSGS


def is_response_msg(msg_type: int) -> bool:
    """Return True for messages that answer an earlier message."""
    return msg_type in _RESPONSE_MSGS


def is_local_msg_target(node_id: int) -> bool:
    """Return True if ``node_id`` addresses a local thread."""
    return node_id in (LOCAL_APPEND_THREAD, LOCAL_APPLY_THREAD)


def vote_resp_msg_type(msg_type: MessageType) -> MessageType:
    """Map a vote or prevote message type to its response type."""
    if msg_type == MessageType.MsgVote:
        return MessageType.MsgVoteResp
    if msg_type == MessageType.MsgPreVote:
        return MessageType.MsgPreVoteResp
    raise ValueError(f"not a vote message: {msg_type}")


def describe_hard_state(hs: HardState) -> str:
    parts = [f"Term:{hs.term}"]
    if hs.vote != 0:
        parts.append(f"Vote:{hs.vote}")
    parts.append(f"Commit:{hs.commit}")
    return " ".join(parts)


def _id_list(ids: Iterable[int]) -> str:
    return "[" + " ".join(str(i) for i in ids) + "]"


def describe_conf_state(state: ConfState) -> str:
    return (
        f"Voters:{_id_list(state.voters)} "
        f"VotersOutgoing:{_id_list(state.voters_outgoing)} "
        f"Learners:{_id_list(state.learners)} "
        f"LearnersNext:{_id_list(state.learners_next)} "
        f"AutoLeave:{'true' if state.auto_leave else 'false'}"
    )


def describe_snapshot(snap: Snapshot) -> str:
    m = snap.metadata
    return f"Index:{m.index} Term:{m.term} ConfState:{describe_conf_state(m.conf_state)}"


def _describe_target(node_id: int) -> str:
    if node_id == NONE:
        return "None"
    if node_id == LOCAL_APPEND_THREAD:
        return "AppendThread"
    if node_id == LOCAL_APPLY_THREAD:
        return "ApplyThread"
    return f"{node_id:x}"


def describe_message(m: Message, formatter: Optional[EntryFormatter] = None) -> str:
    """Return a concise human-readable description of a message."""
    out = [
        f"{_describe_target(m.from_)}->{_describe_target(m.to)} {m.type} "
        f"Term:{m.term} Log:{m.log_term}/{m.index}"
    ]
    if m.reject:
        out.append(f" Rejected (Hint: {m.reject_hint})")
    if m.commit != 0:
        out.append(f" Commit:{m.commit}")
    if m.vote != 0:
        out.append(f" Vote:{m.vote}")
    if m.entries:
        out.append(" Entries:[")
        out.append(", ".join(describe_entry(e, formatter) for e in m.entries))
        out.append("]")
    if m.snapshot is not None and not m.snapshot.is_empty():
        out.append(f" Snapshot: {describe_snapshot(m.snapshot)}")
    if m.responses:
        out.append(" Responses:[")
        out.append(", ".join(describe_message(r, formatter) for r in m.responses))
        out.append("]")
    return "".join(out)


_SIMPLE_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(data: bytes) -> str:
    """Quote bytes as a double-quoted string with escapes for unprintable runes."""
    out = ['"']
    for ch in data.decode("utf-8", errors="surrogateescape"):
        code = ord(ch)
        if ch in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[ch])
        elif 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02x}")
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def describe_entry(e: Entry, formatter: Optional[EntryFormatter] = None) -> str:
    """Return a concise human-readable description of an entry.

    Entry data is rendered by ``formatter``; without one it is quoted.
    """
    fmt = formatter if formatter is not None else _quote
    formatted = fmt(e.data or b"")
    if formatted:
        formatted = " " + formatted
    return f"{e.term}/{e.index} {e.type}{formatted}"


def describe_entries(ents: Iterable[Entry], formatter: Optional[EntryFormatter] = None) -> str:
    """Describe each entry on its own line."""
    return "".join(describe_entry(e, formatter) + "\n" for e in ents)


def ents_size(ents: Iterable[Entry]) -> int:
    """Total protocol buffer encoding size of the entries."""
    return sum(e.size() for e in ents)


def limit_size(ents: Sequence[Entry], max_size: int) -> Sequence[Entry]:
    """Return the longest prefix of ``ents`` whose total size is within ``max_size``.

    A non-empty input always yields at least its first entry.
    """
    if not ents:
        return ents
    total = ents[0].size()
    for limit, entry in enumerate(ents[1:], start=1):
        total += entry.size()
        if total > max_size:
            return ents[:limit]
    return ents


def payload_size(e: Entry) -> int:
    """Size of the entry's payload, independent of its index and term."""
    return len(e.data or b"")


def payloads_size(ents: Iterable[Entry]) -> int:
    return sum(payload_size(e) for e in ents)