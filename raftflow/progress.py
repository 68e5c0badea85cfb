"""A follower's replication progress as seen by the leader."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from raftflow.inflights import Inflights


class StateType(IntEnum):
    """State of a tracked follower."""

    PROBE = 0
    REPLICATE = 1
    SNAPSHOT = 2

    def __str__(self) -> str:
        return _STATE_NAMES[self]


_STATE_NAMES = {
    StateType.PROBE: "StateProbe",
    StateType.REPLICATE: "StateReplicate",
    StateType.SNAPSHOT: "StateSnapshot",
}


@dataclass(kw_only=True)
class Progress:
    """Leader's view of one follower's log replication."""

    match: int = 0
    next: int = 0
    state: StateType = StateType.PROBE
    pending_snapshot: int = 0
    recent_active: bool = False
    msg_app_flow_paused: bool = False
    inflights: Optional[Inflights] = None
    is_learner: bool = False

    def reset_state(self, state: StateType) -> None:
        """Move into ``state``, clearing the pause flag, pending snapshot and inflights."""
        self.msg_app_flow_paused = False
        self.pending_snapshot = 0
        self.state = state
        if self.inflights is not None:
            self.inflights.reset()

    def become_probe(self) -> None:
        """Enter probe state; next becomes match+1 or past the pending snapshot."""
        if self.state == StateType.SNAPSHOT:
            pending = self.pending_snapshot
            self.reset_state(StateType.PROBE)
            self.next = max(self.match + 1, pending + 1)
        else:
            self.reset_state(StateType.PROBE)
            self.next = self.match + 1

    def become_replicate(self) -> None:
        """Enter replicate state, resetting next to match+1."""
        self.reset_state(StateType.REPLICATE)
        self.next = self.match + 1

    def become_snapshot(self, snapshot_index: int) -> None:
        """Enter snapshot state waiting on the snapshot at ``snapshot_index``."""
        self.reset_state(StateType.SNAPSHOT)
        self.pending_snapshot = snapshot_index

    def update_on_entries_send(self, entries: int, size: int, next_index: int) -> None:
        """Account for ``entries`` entries of ``size`` bytes sent from ``next_index`` on."""
        if self.state == StateType.REPLICATE:
            if entries > 0:
                last = next_index + entries - 1
                self.optimistic_update(last)
                self.inflights.add(last, size)
            self.msg_app_flow_paused = self.inflights.full()
        elif self.state == StateType.PROBE:
            if entries > 0:
                self.msg_app_flow_paused = True
        else:
            raise ValueError(f"sending append in unhandled state {self.state}")

    def maybe_update(self, n: int) -> bool:
        """Handle an ack of index ``n``; return False if it is outdated."""
        updated = False
        if self.match < n:
            self.match = n
            updated = True
            self.msg_app_flow_paused = False
        self.next = max(self.next, n + 1)
        return updated

    def optimistic_update(self, n: int) -> None:
        """Mark appends up to and including ``n`` as in flight."""
        self.next = n + 1

    def maybe_decr_to(self, rejected: int, match_hint: int) -> bool:
        """Handle a rejection of the append at ``rejected``; return False if stale."""
        if self.state == StateType.REPLICATE:
            if rejected <= self.match:
                return False
            self.next = self.match + 1
            return True

        if self.next - 1 != rejected:
            return False

        self.next = max(min(rejected, match_hint + 1), 1)
        self.msg_app_flow_paused = False
        return True

    def is_paused(self) -> bool:
        """Return whether sending entries to this follower is throttled."""
        if self.state == StateType.SNAPSHOT:
            return True
        return self.msg_app_flow_paused

    def __str__(self) -> str:
        parts = [f"{self.state} match={self.match} next={self.next}"]
        if self.is_learner:
            parts.append(" learner")
        if self.is_paused():
            parts.append(" paused")
        if self.pending_snapshot > 0:
            parts.append(f" pendingSnap={self.pending_snapshot}")
        if not self.recent_active:
            parts.append(" inactive")
        if self.inflights is not None and (n := self.inflights.count()) > 0:
            parts.append(f" inflight={n}")
            if self.inflights.full():
                parts.append("[full]")
        return "".join(parts)


class ProgressMap(dict):
    """Mapping from node id to Progress."""

    def __str__(self) -> str:
        return "".join(f"{node_id}: {self[node_id]}\n" for node_id in sorted(self))