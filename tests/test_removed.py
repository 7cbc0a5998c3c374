import pytest

from quorumkit.removed import RemovedMember, RemovedMemberError
from quorumkit.types import MemberType, Message, RawMember


def make_removed():
    return RemovedMember(RawMember(id=1, address=":50051"))


def test_removed_accessors():
    r = make_removed()
    assert r.id() == 1
    assert r.address() == ":50051"
    assert r.is_active() is False
    assert r.active_since() is None
    assert r.type() is MemberType.REMOVED


def test_removed_send_raises():
    with pytest.raises(RemovedMemberError):
        make_removed().send(Message())


def test_removed_update_raises_and_keeps_raw():
    r = make_removed()
    with pytest.raises(RemovedMemberError):
        r.update(RawMember())
    assert r.address() == ":50051"
    assert r.raw().address == ":50051"


def test_removed_type_ignores_raw_type():
    r = RemovedMember(RawMember(id=3, type=MemberType.VOTER))
    assert r.type() is MemberType.REMOVED
    assert r.raw().type is MemberType.VOTER


def test_removed_close_and_tear_down_are_quiet():
    r = make_removed()
    assert r.close() is None
    assert r.tear_down(1.0) is None
    assert r.id() == 1


def test_removed_error_message():
    assert "member was removed" in str(RemovedMemberError())