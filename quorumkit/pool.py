"""A thread-safe set of cluster members."""

from __future__ import annotations

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from quorumkit.local import LocalMember
from quorumkit.remote import RemoteMember
from quorumkit.removed import RemovedMember
from quorumkit.types import Member, MemberType, MembershipConfig, RawMember

_MAX_INT63 = 2**63 - 1


class Pool:
    """Holds the members of a cluster keyed by their id."""

    def __init__(self, config: MembershipConfig) -> None:
        self._config = config
        self._logger = config.logger
        self._matcher: Callable[[RawMember], MemberType] = lambda raw: raw.type
        self._lock = threading.Lock()
        self._members: dict[int, Member] = {}

    def register_type_matcher(
        self, fn: Callable[[RawMember], MemberType]
    ) -> None:
        """Set the function that decides what kind of member to build."""
        self._matcher = fn

    def next_id(self) -> int:
        """Return a random positive id not used by any member."""
        while True:
            member_id = random.randint(0, _MAX_INT63) + 1
            if self.get(member_id) is None:
                return member_id

    def members(self) -> list[Member]:
        with self._lock:
            return list(self._members.values())

    def get(self, member_id: int) -> Optional[Member]:
        with self._lock:
            return self._members.get(member_id)

    def add(self, raw: RawMember) -> None:
        """Add a member, or update it if it is already known."""
        if self.get(raw.id) is not None:
            self.update(raw)
            return
        with self._lock:
            self._members[raw.id] = self._new_member(raw)

    def update(self, raw: RawMember) -> None:
        """Update a member, or add it if it is not known."""
        member = self.get(raw.id)
        if member is None:
            self.add(raw)
            return
        member.update(raw)

    def remove(self, raw: RawMember) -> None:
        """Replace a member with one of the kind given by ``raw``."""
        member = self.get(raw.id)
        if member is None:
            raise LookupError(f"membership: member {raw.id:x} not found")
        if member.type() == raw.type:
            return
        with self._lock:
            try:
                member.close()
            except Exception as exc:
                self._logger.warning(
                    "membership: closing member %x: %s", raw.id, exc
                )
            self._members[raw.id] = self._new_member(raw)

    def purge(self) -> None:
        """Forget every removed member."""
        with self._lock:
            self._members = {
                member_id: member
                for member_id, member in self._members.items()
                if member.type() != MemberType.REMOVED
            }

    def snapshot(self) -> list[RawMember]:
        with self._lock:
            return [member.raw() for member in self._members.values()]

    def restore(self, members: Iterable[RawMember]) -> None:
        """Add every member; failures are logged and skipped."""
        for raw in members:
            try:
                self.add(raw)
            except Exception as exc:
                self._logger.error(
                    "membership: adding member %x: %s", raw.id, exc
                )

    def tear_down(self, timeout: Optional[float] = None) -> None:
        """Tear down all members at once and empty the pool.

        The first error raised by a member is raised again once all are done.
        """
        with self._lock:
            members = list(self._members.values())
            self._members = {}
            if not members:
                return
            with ThreadPoolExecutor(max_workers=len(members)) as executor:
                futures = [
                    executor.submit(member.tear_down, timeout) for member in members
                ]
            first: Optional[BaseException] = None
            for future in futures:
                exc = future.exception()
                if exc is not None and first is None:
                    first = exc
            if first is not None:
                raise first

    def _new_member(self, raw: RawMember) -> Member:
        kind = self._matcher(raw)
        if kind in (MemberType.VOTER, MemberType.LEARNER, MemberType.STAGING):
            return RemoteMember(self._config, raw)
        if kind == MemberType.REMOVED:
            return RemovedMember(raw)
        if kind == MemberType.LOCAL:
            return LocalMember(self._config.reporter, raw)
        raise ValueError(f"membership: unknown member type {raw.type}")