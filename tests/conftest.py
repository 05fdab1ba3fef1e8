from collections.abc import Callable

import pytest

from netspeed.scheduler import CancelToken

HEADER = (
    "Inter-|   Receive                                                |  Transmit\n"
    " face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed\n"
)


def build_proc_net_dev(interfaces: dict[str, tuple[int, int]]) -> str:
    lines = [HEADER]
    for name, (rx, tx) in interfaces.items():
        lines.append(
            f"{name:>6}: {rx:>8} {10:>7} 0 0 0 0 0 0 {tx:>8} {10:>7} 0 0 0 0 0 0\n"
        )
    return "".join(lines)


class FakeScheduler:
    """
    Records scheduled callbacks and runs them only when a test calls fire().
    """

    def __init__(self):
        self.queue: list[tuple[int, Callable[[], None], CancelToken]] = []

    def schedule(self, after_ms: int, callback: Callable[[], None]) -> CancelToken:
        token = CancelToken()
        self.queue.append((after_ms, callback, token))
        return token

    @property
    def pending(self) -> list[int]:
        return [after_ms for after_ms, _, token in self.queue if not token.cancelled]

    def fire(self) -> int:
        while self.queue:
            after_ms, callback, token = self.queue.pop(0)
            if token.cancelled:
                continue
            callback()
            return after_ms
        raise AssertionError("nothing scheduled")


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeCounters:
    """
    Stands in for read_counters(); `error` makes the next reads fail.
    """

    def __init__(self, interfaces: dict[str, tuple[int, int]]):
        self.interfaces = interfaces
        self.error: OSError | None = None
        self.before_return: Callable[[], None] | None = None
        self.paths: list[str] = []

    def set(self, name: str, rx: int, tx: int):
        self.interfaces[name] = (rx, tx)

    def __call__(self, path: str) -> str:
        self.paths.append(path)
        if self.error is not None:
            raise self.error
        if self.before_return is not None:
            self.before_return()
        return build_proc_net_dev(self.interfaces)


@pytest.fixture
def proc_net_dev() -> Callable[[dict[str, tuple[int, int]]], str]:
    return build_proc_net_dev


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counters() -> FakeCounters:
    return FakeCounters({"lo": (5000, 5000), "eth0": (1000, 500)})


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
