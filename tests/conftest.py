import pytest

from edulog.errors import CaptureUnavailable
from edulog.models import AudioBlob
from edulog.scheduler import EventLoop


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeRecorder:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.acquired = 0
        self.finalized = 0
        self.active = False

    def acquire(self):
        if self.fail:
            raise CaptureUnavailable("permission denied")
        self.acquired += 1
        return {"id": self.acquired}

    def begin(self, handle) -> None:
        self.active = True

    def finalize(self, handle):
        if handle is None or not self.active:
            return None
        self.active = False
        self.finalized += 1
        return AudioBlob(data=b"RIFF-fake-audio", duration_seconds=5.0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def loop(clock):
    return EventLoop(clock=clock)


@pytest.fixture
def advance(loop, clock):
    def _advance(seconds: int) -> None:
        for _ in range(seconds):
            clock.now += 1.0
            loop.run_due()

    return _advance


@pytest.fixture
def recorder():
    return FakeRecorder()
