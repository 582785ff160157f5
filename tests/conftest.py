import pytest

from pico_workqueue.queue import WorkQueue


class DeferredHandler:
    """Handler that parks every completion until the test releases it."""

    def __init__(self):
        self.calls = []
        self.dones = []

    def __call__(self, payload, done):
        self.calls.append(payload)
        self.dones.append(done)

    def complete_next(self, error=None, result=None):
        done = self.dones.pop(0)
        done(error, result)

    def complete_all(self):
        while self.dones:
            done = self.dones.pop(0)
            done(None, True)


def echo_handler(payload, done):
    done(None, payload)


@pytest.fixture
def deferred():
    """A ``DeferredHandler`` whose completions are triggered explicitly."""
    return DeferredHandler()


@pytest.fixture
def make_queue():
    """Build a ``WorkQueue`` with the echo handler unless one is given."""

    def _make(handler=echo_handler, concurrency=1, **kwargs):
        return WorkQueue(handler, concurrency, **kwargs)

    return _make


@pytest.fixture
def recorder():
    """Callback that records ``(error, result)`` pairs in call order."""
    calls = []

    def callback(error, result):
        calls.append((error, result))

    callback.calls = calls
    return callback
