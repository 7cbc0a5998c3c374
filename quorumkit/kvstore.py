"""A replicated key-value state machine and its command encoding."""

from __future__ import annotations

import io
import json
import logging
import threading
from typing import Any, BinaryIO, Callable, Optional

_logger = logging.getLogger(__name__)

_UINT64_MAX = 2**64 - 1

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _dumps(value: Any, *, sort_keys: bool = False) -> bytes:
    """Compact JSON with the HTML-safe escaping used on the wire."""
    text = json.dumps(
        value, ensure_ascii=False, separators=(",", ":"), sort_keys=sort_keys
    )
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def _loads(data: bytes | str) -> Any:
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    return json.loads(data)


def _field(obj: dict[str, Any], name: str) -> Any:
    """Look up ``name`` with case-insensitive key matching; last match wins."""
    found = None
    folded = name.casefold()
    for key, value in obj.items():
        if key.casefold() == folded:
            found = value
    return found


def _as_object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"cannot decode {type(value).__name__} into {what}")
    return value


def _as_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


def _as_uint64(value: Any, what: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an unsigned integer")
    if not 0 <= value <= _UINT64_MAX:
        raise ValueError(f"{what} out of range for uint64")
    return value


def encode_entry(key: str, value: str) -> bytes:
    """Encode a key-value pair as the JSON a ``kv`` command carries."""
    return _dumps({"Key": key, "Value": value})


def encode_replicate(cmd: str, data: bytes | str) -> bytes:
    """Wrap the JSON document ``data`` in a command envelope named ``cmd``.

    Raises ValueError if ``data`` is not valid JSON.
    """
    payload = _loads(data)
    return _dumps({"CMD": cmd, "Data": payload})


def _decode_entry(payload: Any) -> tuple[str, str]:
    obj = _as_object(payload, "entry")
    return (
        _as_str(_field(obj, "Key"), "Key"),
        _as_str(_field(obj, "Value"), "Value"),
    )


class KVStateMachine:
    """An in-memory string map updated by replicated entries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._kv: dict[str, str] = {}

    def apply(self, data: bytes) -> None:
        """Store the entry encoded in ``data``; undecodable data is logged."""
        try:
            key, value = _decode_entry(_loads(data))
        except (ValueError, UnicodeDecodeError) as exc:
            _logger.error("unable to decode entry: %s", exc)
            return
        self._store(key, value)

    def snapshot(self) -> BinaryIO:
        """Return a readable stream holding the whole map as JSON."""
        with self._lock:
            buf = _dumps(self._kv, sort_keys=True)
        return io.BytesIO(buf)

    def restore(self, reader: BinaryIO) -> None:
        """Merge the map read from ``reader`` into this one, then close it."""
        with self._lock:
            decoded = _loads(reader.read())
            if decoded is None:
                self._kv = {}
            elif isinstance(decoded, dict):
                for key, value in decoded.items():
                    self._kv[key] = _as_str(value, f"value of {key!r}")
            else:
                raise ValueError(
                    f"cannot decode {type(decoded).__name__} into key-value map"
                )
            reader.close()

    def read(self, key: str) -> str:
        """Return the value of ``key``, or an empty string if it is unset."""
        with self._lock:
            return self._kv.get(key, "")

    def _store(self, key: str, value: str) -> None:
        with self._lock:
            self._kv[key] = value


class MultiGroupStateMachine(KVStateMachine):
    """A key-value state machine that also handles group creation commands.

    Data applied to it is a command envelope (see encode_replicate). A
    ``kv`` command stores an entry; a ``group`` command calls
    ``on_create_group(group_id, join_addr)`` when ``whoami()`` is among the
    command's member ids.
    """

    def __init__(
        self,
        whoami: Callable[[], int],
        on_create_group: Callable[[int, str], Optional[Any]],
    ) -> None:
        super().__init__()
        self._whoami = whoami
        self._on_create_group = on_create_group

    def apply(self, data: bytes) -> None:
        try:
            envelope = _as_object(_loads(data), "replicate")
            cmd = _as_str(_field(envelope, "CMD"), "CMD")
            if not any(k.casefold() == "data" for k in envelope):
                raise ValueError("unexpected end of JSON input")
            payload = _field(envelope, "Data")
        except (ValueError, UnicodeDecodeError) as exc:
            _logger.error("unable to decode replicate: %s", exc)
            return

        if cmd == "kv":
            try:
                key, value = _decode_entry(payload)
            except ValueError as exc:
                _logger.error("unable to decode entry: %s", exc)
                return
            self._store(key, value)
        elif cmd == "group":
            try:
                obj = _as_object(payload, "createGroup")
                group_id = _as_uint64(_field(obj, "GroupID"), "GroupID")
                raw_ids = _field(obj, "IDs")
                if raw_ids is None:
                    raw_ids = []
                if not isinstance(raw_ids, list):
                    raise ValueError("IDs must be a list")
                ids = [_as_uint64(i, "IDs") for i in raw_ids]
                join_addr = _as_str(_field(obj, "JoinAddr"), "JoinAddr")
            except ValueError as exc:
                _logger.error("unable to decode createGroup: %s", exc)
                return

            if self._whoami() not in ids:
                _logger.info("ignore create group cmd; this node not part of it.")
                return
            self._on_create_group(group_id, join_addr)