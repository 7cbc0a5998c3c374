"""A cluster member reached over the network."""

from __future__ import annotations

import threading
import time
from collections import deque
from datetime import datetime, timezone
from typing import Optional

from quorumkit.types import (
    Client,
    Member,
    MemberType,
    MembershipConfig,
    Message,
    MessageType,
    RawMember,
    SnapshotStatus,
)


def _same_error(err: BaseException, prev: Optional[BaseException]) -> bool:
    return (
        prev is not None
        and type(err) is type(prev)
        and str(err) == str(prev)
    )


class RemoteMember(Member):
    """A remote member; messages are queued and delivered by worker threads."""

    def __init__(self, config: MembershipConfig, raw: RawMember) -> None:
        if config.dial is None:
            raise ValueError("membership: config has no dial function")

        workers, size = 1, 4096
        if config.allow_pipelining:
            # Keeps the pipeline from dropping messages when the network
            # is briefly out of work.
            workers, size = 4, 64

        self._client: Client = config.dial(raw.address)
        self._config = config
        self._reporter = config.reporter
        self._dial = config.dial
        self._logger = config.logger
        self._raw = raw
        self._size = size
        self._stop = threading.Event()
        self._queue: deque[Message] = deque()
        self._queue_cond = threading.Condition()
        self._queue_closed = False
        self._lock = threading.Lock()
        self._active = True
        self._active_since: Optional[datetime] = datetime.now(timezone.utc)

        self._logger.debug(
            "membership: setup pipelining for remote member %x "
            "[pipelines: %d, buffer size: %d]",
            raw.id,
            workers,
            size,
        )

        self._workers = [
            threading.Thread(target=self._process, daemon=True)
            for _ in range(workers)
        ]
        for worker in self._workers:
            worker.start()

    def raw(self) -> RawMember:
        return self._raw

    def type(self) -> MemberType:
        return self._raw.type

    def id(self) -> int:
        return self._raw.id

    def address(self) -> str:
        return self._raw.address

    def active_since(self) -> Optional[datetime]:
        with self._lock:
            return self._active_since

    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def send(self, msg: Message) -> None:
        """Queue ``msg`` for delivery; raise if stopped or the buffer is full."""
        try:
            if self._cancelled():
                raise self._cancelled_error()
            with self._queue_cond:
                if self._queue_closed:
                    raise self._cancelled_error()
                if len(self._queue) >= self._size:
                    raise BufferError(
                        f"cluster member {self.id():x}, buffer is full "
                        "(overloaded network)"
                    )
                self._queue.append(msg)
                self._queue_cond.notify()
        except Exception as exc:
            self._report(msg, exc)
            raise

    def update(self, raw: RawMember) -> None:
        """Take a new description; reconnect if the address changed."""
        if self._raw.address == raw.address or self._cancelled():
            self._raw = raw
            if self._cancelled():
                raise self._cancelled_error()
            return

        with self._lock:
            client = self._dial(raw.address)
            self._client.close()
            self._client = client
            self._raw = raw

    def close(self) -> None:
        self.tear_down(self._config.drain_timeout)

    def tear_down(self, timeout: Optional[float] = None) -> None:
        """Stop the workers, drain queued messages within ``timeout``, disconnect."""
        self._stop.set()
        with self._queue_cond:
            self._queue_closed = True
            self._queue_cond.notify_all()
        for worker in self._workers:
            worker.join()
        deadline = None if timeout is None else time.monotonic() + timeout
        self._process(draining=True, deadline=deadline)
        self._set_status(False)
        self._current_client().close()

    def _cancelled(self) -> bool:
        return self._stop.is_set() or self._config.stopped.is_set()

    def _cancelled_error(self) -> ConnectionAbortedError:
        return ConnectionAbortedError(
            f"membership: member {self.id():x}: context canceled"
        )

    def _set_status(self, active: bool) -> None:
        with self._lock:
            if not self._active and active:
                self._active_since = datetime.now(timezone.utc)
                self._active = True
            elif self._active and not active:
                self._active_since = None
                self._active = False

    def _report(self, msg: Message, err: Optional[BaseException]) -> None:
        if self._reporter is None:
            return
        if err is None and msg.type == MessageType.MSG_SNAP:
            self._reporter.report_snapshot(self.id(), SnapshotStatus.FINISH)
        elif err is not None and msg.type == MessageType.MSG_SNAP:
            self._reporter.report_snapshot(self.id(), SnapshotStatus.FAILURE)
        elif err is not None:
            self._reporter.report_unreachable(self.id())

    def _current_client(self) -> Client:
        with self._lock:
            return self._client

    def _next(self) -> Optional[Message]:
        with self._queue_cond:
            self._queue_cond.wait_for(
                lambda: bool(self._queue) or self._queue_closed
            )
            return self._queue.popleft() if self._queue else None

    def _process(
        self, draining: bool = False, deadline: Optional[float] = None
    ) -> None:
        prev: Optional[BaseException] = None
        stream_timeout = self._config.stream_timeout
        while True:
            msg = self._next()
            if msg is None:
                return
            if draining:
                if deadline is None:
                    timeout: Optional[float] = stream_timeout
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return
                    timeout = min(stream_timeout, remaining)
            else:
                if self._cancelled():
                    return
                timeout = stream_timeout

            err: Optional[BaseException] = None
            try:
                self._current_client().message(msg, timeout)
            except Exception as exc:
                err = exc

            if err is not None:
                if not _same_error(err, prev) or self._logger.isEnabledFor(10):
                    self._logger.error(
                        "membership: sending message to member %x: %s",
                        self.id(),
                        err,
                    )
            elif prev is not None:
                self._logger.info(
                    "membership: sending message to member %x succeed", self.id()
                )
            prev = err
            self._set_status(err is None)
            self._report(msg, err)