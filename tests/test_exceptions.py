import pytest

from pico_workqueue.exceptions import (
    AbandonedTaskError,
    DuplicateCompletionError,
    HandlerError,
    InvalidArgumentError,
    InvalidConfigurationError,
    WorkQueueError,
)
from pico_workqueue.task import Task


class TestHandlerError:
    def test_keeps_raw_value(self):
        error = HandlerError({"code": 500})
        assert error.error == {"code": 500}
        assert "500" in str(error)


class TestDuplicateCompletionError:
    def test_message_and_task(self):
        task = Task(payload="job-1")
        error = DuplicateCompletionError(task)
        assert error.task is task
        assert "job-1" in str(error)
        assert "more than once" in str(error)


class TestAbandonedTaskError:
    def test_message(self):
        error = AbandonedTaskError(7)
        assert error.payload == 7
        assert "dropped" in str(error)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error_cls",
        [InvalidConfigurationError, InvalidArgumentError, HandlerError, DuplicateCompletionError, AbandonedTaskError],
    )
    def test_all_errors_inherit_from_base(self, error_cls):
        assert issubclass(error_cls, WorkQueueError)

    def test_can_catch_as_base(self):
        with pytest.raises(WorkQueueError):
            raise InvalidConfigurationError("bad concurrency")

    def test_base_is_exception(self):
        assert issubclass(WorkQueueError, Exception)
        assert not issubclass(Exception, WorkQueueError)
