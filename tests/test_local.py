from datetime import datetime, timezone

import pytest

from quorumkit.local import LocalMember
from quorumkit.types import MemberType, Message, RawMember, Reporter


class RecordingReporter(Reporter):
    def __init__(self):
        self.calls = []

    def report_unreachable(self, member_id):
        self.calls.append(("unreachable", member_id))

    def report_shutdown(self, member_id):
        self.calls.append(("shutdown", member_id))

    def report_snapshot(self, member_id, status):
        self.calls.append(("snapshot", member_id, status))


def make_local(reporter=None):
    return LocalMember(
        reporter, RawMember(id=1, address=":8080", type=MemberType.LEARNER)
    )


def test_local_accessors():
    before = datetime.now(timezone.utc)
    local = make_local()
    assert local.id() == 1
    assert local.address() == ":8080"
    assert local.type() is MemberType.LEARNER
    assert local.is_active()
    assert before <= local.active_since() <= datetime.now(timezone.utc)


def test_local_update_replaces_raw():
    local = make_local()
    raw = RawMember(id=2)
    local.update(raw)
    assert local.address() == ""
    assert local.raw() == raw
    assert local.id() == 2


def test_local_send_is_an_error():
    with pytest.raises(RuntimeError):
        make_local().send(Message())


def test_local_close_reports_shutdown():
    reporter = RecordingReporter()
    make_local(reporter).close()
    assert reporter.calls == [("shutdown", 1)]


def test_local_tear_down_reports_shutdown():
    reporter = RecordingReporter()
    make_local(reporter).tear_down(1.0)
    assert reporter.calls == [("shutdown", 1)]