import pytest

from draftxfer.taskpool import TaskPool


def test_launch_returns_result():
    with TaskPool(2) as pool:
        future = pool.launch(lambda stop, a, b: a + b, 2, 3)
        assert future.result(timeout=5) == 5


def test_stop_token_is_passed_and_not_set():
    with TaskPool(1) as pool:
        future = pool.launch(lambda stop: stop.is_set())
        assert future.result(timeout=5) is False


def test_exception_is_delivered_through_future():
    def boom(stop):
        raise ValueError("bad input")

    with TaskPool(1) as pool:
        future = pool.launch(boom)
        with pytest.raises(ValueError, match="bad input"):
            future.result(timeout=5)


def test_many_tasks_all_complete():
    with TaskPool(3) as pool:
        futures = [pool.launch(lambda stop, n: n * n, n) for n in range(20)]
        assert [f.result(timeout=5) for f in futures] == [n * n for n in range(20)]


def test_resize_changes_size():
    with TaskPool(1) as pool:
        assert pool.size() == 1
        pool.resize(4)
        assert pool.size() == 4
        pool.resize(2)
        assert pool.size() == 2


def test_queue_limit_rejects_extra_work():
    with TaskPool(0) as pool:
        pool.set_queue_size_limit(1)
        assert pool.launch(lambda stop: 1) is not None
        assert pool.launch(lambda stop: 2) is None


def test_cancel_marks_pool_cancelled():
    pool = TaskPool(1)
    assert not pool.cancelled()
    pool.cancel()
    assert pool.cancelled()
    pool.resize(0)
    assert pool.size() == 0