"""Shared data types and interfaces for cluster membership."""

from __future__ import annotations

import abc
import enum
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional


class MemberType(enum.IntEnum):
    """Role of a member in the cluster."""

    VOTER = 0
    LEARNER = 1
    STAGING = 2
    REMOVED = 3
    LOCAL = 4


@dataclass(frozen=True)
class RawMember:
    """Plain description of a cluster member."""

    id: int = 0
    address: str = ""
    type: MemberType = MemberType.VOTER


class MessageType(enum.IntEnum):
    """Kinds of consensus protocol messages."""

    MSG_HUP = 0
    MSG_BEAT = 1
    MSG_PROP = 2
    MSG_APP = 3
    MSG_APP_RESP = 4
    MSG_VOTE = 5
    MSG_VOTE_RESP = 6
    MSG_SNAP = 7
    MSG_HEARTBEAT = 8
    MSG_HEARTBEAT_RESP = 9
    MSG_UNREACHABLE = 10
    MSG_SNAP_STATUS = 11
    MSG_CHECK_QUORUM = 12
    MSG_TRANSFER_LEADER = 13
    MSG_TIMEOUT_NOW = 14
    MSG_READ_INDEX = 15
    MSG_READ_INDEX_RESP = 16
    MSG_PRE_VOTE = 17
    MSG_PRE_VOTE_RESP = 18


@dataclass(frozen=True)
class Message:
    """A consensus protocol message addressed to one member."""

    type: MessageType = MessageType.MSG_HUP
    to: int = 0
    sender: int = 0
    term: int = 0
    index: int = 0
    data: bytes = b""


class SnapshotStatus(enum.IntEnum):
    """Outcome of sending a snapshot to a member."""

    FINISH = 1
    FAILURE = 2


class Reporter(abc.ABC):
    """Receives reports about the status of members."""

    @abc.abstractmethod
    def report_unreachable(self, member_id: int) -> None: ...

    @abc.abstractmethod
    def report_shutdown(self, member_id: int) -> None: ...

    @abc.abstractmethod
    def report_snapshot(self, member_id: int, status: SnapshotStatus) -> None: ...


class Client(abc.ABC):
    """A connection used to deliver messages to a remote member."""

    @abc.abstractmethod
    def message(self, msg: Message, timeout: Optional[float]) -> None:
        """Deliver ``msg``; raise on failure."""

    @abc.abstractmethod
    def close(self) -> None: ...


Dial = Callable[[str], Client]


@dataclass
class MembershipConfig:
    """Settings shared by the members of a pool."""

    dial: Optional[Dial] = None
    reporter: Optional[Reporter] = None
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("quorumkit.membership")
    )
    stream_timeout: float = 10.0
    drain_timeout: float = 10.0
    allow_pipelining: bool = False
    stopped: threading.Event = field(default_factory=threading.Event)


class Member(abc.ABC):
    """A member of the cluster."""

    @abc.abstractmethod
    def id(self) -> int: ...

    @abc.abstractmethod
    def address(self) -> str: ...

    @abc.abstractmethod
    def active_since(self) -> Optional[datetime]:
        """When the member became active, or None if it is not."""

    @abc.abstractmethod
    def is_active(self) -> bool: ...

    @abc.abstractmethod
    def update(self, raw: RawMember) -> None: ...

    @abc.abstractmethod
    def send(self, msg: Message) -> None: ...

    @abc.abstractmethod
    def type(self) -> MemberType: ...

    @abc.abstractmethod
    def raw(self) -> RawMember: ...

    @abc.abstractmethod
    def close(self) -> None: ...

    @abc.abstractmethod
    def tear_down(self, timeout: Optional[float]) -> None: ...