import pytest

from raftflow.inflights import Inflights
from raftflow.progress import Progress, ProgressMap, StateType


@pytest.mark.parametrize(
    "state,expected",
    [
        (StateType.PROBE, "StateProbe match=0 next=0"),
        (StateType.REPLICATE, "StateReplicate match=0 next=0"),
        (StateType.SNAPSHOT, "StateSnapshot match=0 next=0 paused"),
    ],
)
def test_state_type_str(state, expected):
    assert str(state) == expected.split()[0]
    pr = Progress(state=state, recent_active=True, inflights=Inflights(4, 0))
    assert str(pr) == expected


def test_progress_string():
    ins = Inflights(1, 0)
    ins.add(123, 1)
    pr = Progress(
        match=1,
        next=2,
        state=StateType.SNAPSHOT,
        pending_snapshot=123,
        recent_active=False,
        msg_app_flow_paused=True,
        is_learner=True,
        inflights=ins,
    )
    expected = "StateSnapshot match=1 next=2 learner paused pendingSnap=123 inactive inflight=1[full]"
    assert str(pr) == expected


@pytest.mark.parametrize(
    "state,paused,want",
    [
        (StateType.PROBE, False, False),
        (StateType.PROBE, True, True),
        (StateType.REPLICATE, False, False),
        (StateType.REPLICATE, True, True),
        (StateType.SNAPSHOT, False, True),
        (StateType.SNAPSHOT, True, True),
    ],
)
def test_is_paused(state, paused, want):
    p = Progress(state=state, msg_app_flow_paused=paused, inflights=Inflights(256, 0))
    assert p.is_paused() is want


def test_resume():
    p = Progress(next=2, msg_app_flow_paused=True)
    p.maybe_decr_to(1, 1)
    assert p.msg_app_flow_paused is False
    p.msg_app_flow_paused = True
    p.maybe_update(2)
    assert p.msg_app_flow_paused is False


@pytest.mark.parametrize(
    "state,pending,wnext",
    [
        (StateType.REPLICATE, 0, 2),
        (StateType.SNAPSHOT, 10, 11),
        (StateType.SNAPSHOT, 0, 2),
    ],
)
def test_become_probe(state, pending, wnext):
    p = Progress(
        state=state, match=1, next=5, pending_snapshot=pending, inflights=Inflights(256, 0)
    )
    p.become_probe()
    assert p.state == StateType.PROBE
    assert p.match == 1
    assert p.next == wnext
    assert p.pending_snapshot == 0


def test_become_replicate():
    p = Progress(state=StateType.PROBE, match=1, next=5, inflights=Inflights(256, 0))
    p.become_replicate()
    assert p.state == StateType.REPLICATE
    assert p.match == 1
    assert p.next == p.match + 1


def test_become_snapshot():
    p = Progress(state=StateType.PROBE, match=1, next=5, inflights=Inflights(256, 0))
    p.become_snapshot(10)
    assert p.state == StateType.SNAPSHOT
    assert p.match == 1
    assert p.pending_snapshot == 10


def test_reset_state_clears_inflights():
    ins = Inflights(4, 0)
    ins.add(3, 10)
    p = Progress(state=StateType.REPLICATE, msg_app_flow_paused=True, inflights=ins)
    p.reset_state(StateType.PROBE)
    assert p.inflights.count() == 0
    assert p.msg_app_flow_paused is False
    assert p.state == StateType.PROBE


PREV_M, PREV_N = 3, 5


@pytest.mark.parametrize(
    "update,wm,wn,wok",
    [
        (PREV_M - 1, PREV_M, PREV_N, False),
        (PREV_M, PREV_M, PREV_N, False),
        (PREV_M + 1, PREV_M + 1, PREV_N, True),
        (PREV_M + 2, PREV_M + 2, PREV_N + 1, True),
    ],
)
def test_maybe_update(update, wm, wn, wok):
    p = Progress(match=PREV_M, next=PREV_N)
    assert p.maybe_update(update) is wok
    assert p.match == wm
    assert p.next == wn


@pytest.mark.parametrize(
    "state,m,n,rejected,last,w,wn",
    [
        (StateType.REPLICATE, 5, 10, 5, 5, False, 10),
        (StateType.REPLICATE, 5, 10, 4, 4, False, 10),
        (StateType.REPLICATE, 5, 10, 9, 9, True, 6),
        (StateType.PROBE, 0, 0, 0, 0, False, 0),
        (StateType.PROBE, 0, 10, 5, 5, False, 10),
        (StateType.PROBE, 0, 10, 9, 9, True, 9),
        (StateType.PROBE, 0, 2, 1, 1, True, 1),
        (StateType.PROBE, 0, 1, 0, 0, True, 1),
        (StateType.PROBE, 0, 10, 9, 2, True, 3),
        (StateType.PROBE, 0, 10, 9, 0, True, 1),
    ],
)
def test_maybe_decr_to(state, m, n, rejected, last, w, wn):
    p = Progress(state=state, match=m, next=n)
    assert p.maybe_decr_to(rejected, last) is w
    assert p.match == m
    assert p.next == wn


def test_optimistic_update():
    p = Progress(match=1, next=2)
    p.optimistic_update(7)
    assert p.next == 8
    assert p.match == 1


def test_update_on_entries_send_replicate():
    p = Progress(state=StateType.REPLICATE, match=4, next=5, inflights=Inflights(2, 0))
    p.update_on_entries_send(3, 30, 5)
    assert p.next == 8
    assert list(p.inflights) == [(7, 30)]
    assert p.msg_app_flow_paused is False
    p.update_on_entries_send(1, 10, 8)
    assert p.next == 9
    assert p.inflights.count() == 2
    assert p.msg_app_flow_paused is True


def test_update_on_entries_send_replicate_empty_when_full():
    ins = Inflights(1, 0)
    ins.add(4, 1)
    p = Progress(state=StateType.REPLICATE, match=4, next=5, inflights=ins)
    p.update_on_entries_send(0, 0, 5)
    assert p.next == 5
    assert p.msg_app_flow_paused is True


def test_update_on_entries_send_probe():
    p = Progress(state=StateType.PROBE, next=3, inflights=Inflights(4, 0))
    p.update_on_entries_send(0, 0, 3)
    assert p.msg_app_flow_paused is False
    p.update_on_entries_send(2, 20, 3)
    assert p.msg_app_flow_paused is True
    assert p.next == 3


def test_update_on_entries_send_snapshot_raises():
    p = Progress(state=StateType.SNAPSHOT, inflights=Inflights(4, 0))
    with pytest.raises(ValueError, match="StateSnapshot"):
        p.update_on_entries_send(1, 1, 1)


def test_progress_map_str_sorted():
    prs = ProgressMap()
    prs[3] = Progress(match=2, next=3, recent_active=True, inflights=Inflights(4, 0))
    prs[1] = Progress(
        state=StateType.REPLICATE, match=5, next=6, inflights=Inflights(4, 0)
    )
    assert str(prs) == (
        "1: StateReplicate match=5 next=6 inactive\n"
        "3: StateProbe match=2 next=3\n"
    )