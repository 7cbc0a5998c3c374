"""Thread-safe boolean and unsigned 64-bit integer cells."""

from __future__ import annotations

import threading

_UINT64_MAX = 2**64 - 1


class AtomicBool:
    """A boolean flag that can be read and written from several threads."""

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = False

    def set(self) -> None:
        """Set the flag to true."""
        with self._lock:
            self._value = True

    def unset(self) -> None:
        """Set the flag to false."""
        with self._lock:
            self._value = False

    def is_true(self) -> bool:
        with self._lock:
            return self._value

    def is_false(self) -> bool:
        return not self.is_true()

    def __bool__(self) -> bool:
        return self.is_true()

    def __str__(self) -> str:
        return "true" if self.is_true() else "false"

    def __repr__(self) -> str:
        return f"AtomicBool({self})"


class AtomicUint64:
    """An unsigned 64-bit integer that can be shared between threads."""

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def set(self, n: int) -> None:
        """Store ``n``; it must fit in an unsigned 64-bit integer."""
        if not 0 <= n <= _UINT64_MAX:
            raise ValueError(f"value {n} out of range for uint64")
        with self._lock:
            self._value = n

    def get(self) -> int:
        with self._lock:
            return self._value

    def __str__(self) -> str:
        return str(self.get())

    def __repr__(self) -> str:
        return f"AtomicUint64({self})"