import io

import pytest

from quorumkit.controller import Controller, JoinResponse, Router, UnknownGroupError
from quorumkit.types import MemberType, Message, RawMember


class NotLeaderError(Exception):
    pass


class FakeEngine:
    def __init__(self):
        self.pushed = []

    def push(self, message):
        self.pushed.append(message)


class FakeNode:
    def __init__(self, known=None, error=None):
        self.known = known or {}
        self.error = error
        self.calls = []

    def get_member(self, member_id):
        return self.known.get(member_id)

    def add_member(self, member):
        self.calls.append(("add", member))
        if self.error:
            raise self.error

    def update_member(self, member):
        self.calls.append(("update", member))
        if self.error:
            raise self.error

    def promote_member(self, member_id, forced):
        self.calls.append(("promote", member_id, forced))
        if self.error:
            raise self.error


class FakePool:
    def __init__(self, members):
        self.members = members

    def snapshot(self):
        return list(self.members)


class FakeSnapshotter:
    def __init__(self):
        self.opened = []

    def writer(self, term, index):
        self.opened.append(("writer", term, index))
        return io.BytesIO()

    def reader(self, term, index):
        self.opened.append(("reader", term, index))
        return io.BytesIO(b"snapshot")


class FakeStorage:
    def __init__(self):
        self.snap = FakeSnapshotter()

    def snapshotter(self):
        return self.snap


def test_controller_push():
    engine = FakeEngine()
    ctrl = Controller(None, engine, None, None)
    msg = Message(type=7, to=2)
    ctrl.push(0, msg)
    assert engine.pushed == [msg]


def test_controller_promote_member_error():
    node = FakeNode(error=NotLeaderError("not leader"))
    ctrl = Controller(node, None, None, None)
    with pytest.raises(NotLeaderError):
        ctrl.promote_member(0, RawMember(id=4))
    assert node.calls == [("promote", 4, True)]


def test_controller_join_new_member_error():
    node = FakeNode(error=NotLeaderError("not leader"))
    ctrl = Controller(node, None, FakePool([]), None)
    with pytest.raises(NotLeaderError):
        ctrl.join(0, RawMember(id=10))
    assert node.calls == [("add", RawMember(id=10))]


def test_controller_join_existing_member():
    existing = RawMember(id=123, type=MemberType.VOTER)
    node = FakeNode(known={123: object()})
    pool = FakePool([existing])
    ctrl = Controller(node, None, pool, None)
    resp = ctrl.join(0, RawMember(id=123))
    assert resp == JoinResponse(id=123, members=[existing])
    assert node.calls == [("update", RawMember(id=123))]


def test_controller_snapshot_streams():
    storage = FakeStorage()
    ctrl = Controller(None, None, None, storage)
    ctrl.snapshot_writer(0, 2, 5)
    reader = ctrl.snapshot_reader(0, 3, 6)
    assert reader.read() == b"snapshot"
    assert storage.snap.opened == [("writer", 2, 5), ("reader", 3, 6)]


@pytest.mark.parametrize(
    "call",
    [
        lambda r: r.promote_member(0, RawMember()),
        lambda r: r.join(0, None),
        lambda r: r.push(0, Message()),
        lambda r: r.snapshot_writer(0, 1, 1),
        lambda r: r.snapshot_reader(0, 1, 1),
    ],
)
def test_router_unknown_group(call):
    with pytest.raises(UnknownGroupError, match="unknown group"):
        call(Router())


def test_router_add_remove():
    ctrl = Controller(None, FakeEngine(), None, None)
    router = Router()
    router.add(100, ctrl)
    assert router.get(100) is ctrl
    router.remove(100)
    with pytest.raises(UnknownGroupError):
        router.get(100)


def test_router_dispatches_push():
    engine = FakeEngine()
    router = Router()
    router.add(0x1F, Controller(None, engine, None, None))
    msg = Message(to=3)
    router.push(0x1F, msg)
    assert engine.pushed == [msg]
    with pytest.raises(UnknownGroupError, match="unknown group id 20"):
        router.push(0x20, msg)