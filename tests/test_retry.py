import pytest

from territory.services.retry import with_retries


class Flaky:
    def __init__(self, failures: int, value: str = "ok") -> None:
        self.failures = failures
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"failure {self.calls}")
        return self.value


def test_with_retries_returns_first_success():
    sleeps: list[float] = []
    task = Flaky(failures=0)

    assert with_retries(task, sleep=sleeps.append) == "ok"
    assert task.calls == 1
    assert sleeps == []


def test_with_retries_backs_off_exponentially():
    sleeps: list[float] = []
    task = Flaky(failures=2)

    assert with_retries(task, attempts=3, initial_delay=0.5, sleep=sleeps.append) == "ok"
    assert task.calls == 3
    assert sleeps == [0.5, 1.0]


def test_with_retries_reraises_last_error_without_final_sleep():
    sleeps: list[float] = []
    task = Flaky(failures=10)

    with pytest.raises(ConnectionError, match="failure 3"):
        with_retries(task, attempts=3, initial_delay=0.8, sleep=sleeps.append)

    assert task.calls == 3
    assert sleeps == [0.8, 1.6]


def test_with_retries_treats_non_positive_attempts_as_one():
    sleeps: list[float] = []
    task = Flaky(failures=1)

    with pytest.raises(ConnectionError):
        with_retries(task, attempts=0, sleep=sleeps.append)

    assert task.calls == 1
    assert sleeps == []


def test_with_retries_reraises_the_original_exception_object():
    error = TimeoutError("gateway timeout")
    calls = []

    def task():
        calls.append(1)
        raise error

    with pytest.raises(TimeoutError) as excinfo:
        with_retries(task, attempts=2, initial_delay=0.1, sleep=lambda _: None)

    assert excinfo.value is error
    assert len(calls) == 2
