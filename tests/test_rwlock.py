import threading
import time

import pytest

from useragent_service.utils.rwlock import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=2)

    def reader() -> None:
        with lock.read():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert not inside.broken


def test_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()
    events: list[str] = []

    lock.acquire_read()

    def writer() -> None:
        with lock.write():
            events.append("write")

    t = threading.Thread(target=writer)
    t.start()
    time.sleep(0.05)
    events.append("read_done")
    lock.release_read()
    t.join(timeout=2)

    assert events == ["read_done", "write"]


def test_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    events: list[str] = []

    lock.acquire_read()

    def writer() -> None:
        with lock.write():
            events.append("write")

    def late_reader() -> None:
        with lock.read():
            events.append("late_read")

    w = threading.Thread(target=writer)
    w.start()
    time.sleep(0.05)
    r = threading.Thread(target=late_reader)
    r.start()
    time.sleep(0.05)
    lock.release_read()
    w.join(timeout=2)
    r.join(timeout=2)

    assert events == ["write", "late_read"]


def test_unbalanced_release_raises() -> None:
    lock = ReadWriteLock()

    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()
