import threading

import pytest

from quorumkit.atomic import AtomicBool, AtomicUint64


def test_bool_starts_false():
    flag = AtomicBool()
    assert flag.is_false()
    assert not flag.is_true()
    assert not flag


def test_bool_set_and_unset():
    flag = AtomicBool()
    flag.set()
    assert flag.is_true()
    assert bool(flag) is True
    flag.unset()
    assert flag.is_false()
    assert bool(flag) is False


def test_bool_string_form():
    flag = AtomicBool()
    assert str(flag) == "false"
    flag.set()
    assert str(flag) == "true"


def test_uint64_starts_at_zero():
    assert AtomicUint64().get() == 0


def test_uint64_set_get_roundtrip():
    cell = AtomicUint64()
    cell.set(123456789)
    assert cell.get() == 123456789
    assert str(cell) == str(123456789)


def test_uint64_accepts_maximum():
    cell = AtomicUint64()
    cell.set(2**64 - 1)
    assert cell.get() == 2**64 - 1


@pytest.mark.parametrize("bad", [-1, 2**64])
def test_uint64_rejects_out_of_range(bad):
    cell = AtomicUint64()
    cell.set(7)
    with pytest.raises(ValueError):
        cell.set(bad)
    assert cell.get() == 7


def test_uint64_concurrent_writers_leave_one_written_value():
    cell = AtomicUint64()
    values = list(range(1, 21))
    threads = [threading.Thread(target=cell.set, args=(v,)) for v in values]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert cell.get() in values