"""Handlers for requests from peers, and routing of them by group id."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from quorumkit.types import Message, RawMember


@dataclass
class JoinResponse:
    """Answer to a join request: the member's id and the current members."""

    id: int
    members: list[RawMember] = field(default_factory=list)


class UnknownGroupError(LookupError):
    """Raised when a request names a group that is not registered."""

    def __init__(self, group_id: int) -> None:
        super().__init__(f"raft: unknown group id {group_id:x}")
        self.group_id = group_id


class Controller:
    """Serves peer requests for one node.

    ``node`` provides get_member, add_member, update_member and
    promote_member; ``engine`` provides push; ``pool`` provides snapshot;
    ``storage`` provides snapshotter() with writer and reader.
    """

    def __init__(self, node: Any, engine: Any, pool: Any, storage: Any) -> None:
        self._node = node
        self._engine = engine
        self._pool = pool
        self._storage = storage

    def join(self, group_id: int, member: RawMember) -> JoinResponse:
        """Add or update ``member`` and return the cluster's members."""
        if self._node.get_member(member.id) is None:
            self._node.add_member(member)
        else:
            self._node.update_member(member)
        return JoinResponse(id=member.id, members=self._pool.snapshot())

    def push(self, group_id: int, message: Message) -> None:
        self._engine.push(message)

    def promote_member(self, group_id: int, member: RawMember) -> None:
        self._node.promote_member(member.id, True)

    def snapshot_writer(self, group_id: int, term: int, index: int) -> BinaryIO:
        return self._storage.snapshotter().writer(term, index)

    def snapshot_reader(self, group_id: int, term: int, index: int) -> BinaryIO:
        return self._storage.snapshotter().reader(term, index)


class Router:
    """Dispatches peer requests to the controller of their group."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._controllers: dict[int, Controller] = {}

    def add(self, group_id: int, controller: Controller) -> None:
        with self._lock:
            self._controllers[group_id] = controller

    def remove(self, group_id: int) -> None:
        with self._lock:
            self._controllers.pop(group_id, None)

    def get(self, group_id: int) -> Controller:
        with self._lock:
            try:
                return self._controllers[group_id]
            except KeyError:
                raise UnknownGroupError(group_id) from None

    def join(self, group_id: int, member: RawMember) -> JoinResponse:
        return self.get(group_id).join(group_id, member)

    def push(self, group_id: int, message: Message) -> None:
        self.get(group_id).push(group_id, message)

    def promote_member(self, group_id: int, member: RawMember) -> None:
        self.get(group_id).promote_member(group_id, member)

    def snapshot_writer(self, group_id: int, term: int, index: int) -> BinaryIO:
        return self.get(group_id).snapshot_writer(group_id, term, index)

    def snapshot_reader(self, group_id: int, term: int, index: int) -> BinaryIO:
        return self.get(group_id).snapshot_reader(group_id, term, index)