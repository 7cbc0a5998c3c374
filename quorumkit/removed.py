"""A member that has been removed from the cluster."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from quorumkit.types import Member, MemberType, Message, RawMember


class RemovedMemberError(Exception):
    """Raised when a removed member is asked to act."""

    def __init__(self, message: str = "membership: member was removed") -> None:
        super().__init__(message)


class RemovedMember(Member):
    """A removed member; it keeps its description but refuses all work."""

    def __init__(self, raw: RawMember) -> None:
        self._raw = raw

    def id(self) -> int:
        return self._raw.id

    def address(self) -> str:
        return self._raw.address

    def send(self, msg: Message) -> None:
        raise RemovedMemberError()

    def type(self) -> MemberType:
        return MemberType.REMOVED

    def update(self, raw: RawMember) -> None:
        raise RemovedMemberError()

    def raw(self) -> RawMember:
        return self._raw

    def close(self) -> None:
        return None

    def tear_down(self, timeout: Optional[float] = None) -> None:
        return None

    def active_since(self) -> Optional[datetime]:
        return None

    def is_active(self) -> bool:
        return False