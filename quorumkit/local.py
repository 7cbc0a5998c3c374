"""The member that represents this node itself."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from quorumkit.types import Member, MemberType, Message, RawMember, Reporter


class LocalMember(Member):
    """The current node; it never sends messages to itself."""

    def __init__(self, reporter: Optional[Reporter], raw: RawMember) -> None:
        self._reporter = reporter
        self._active: Optional[datetime] = datetime.now(timezone.utc)
        self._raw = raw

    def id(self) -> int:
        return self._raw.id

    def address(self) -> str:
        return self._raw.address

    def active_since(self) -> Optional[datetime]:
        return self._active

    def is_active(self) -> bool:
        return self._active is not None

    def type(self) -> MemberType:
        return self._raw.type

    def update(self, raw: RawMember) -> None:
        self._raw = raw

    def close(self) -> None:
        if self._reporter is not None:
            self._reporter.report_shutdown(self.id())

    def send(self, msg: Message) -> None:
        raise RuntimeError(
            "membership: attempted to send msg to local member; should never happen"
        )

    def raw(self) -> RawMember:
        return self._raw

    def tear_down(self, timeout: Optional[float] = None) -> None:
        self.close()