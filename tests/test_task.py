import asyncio
import threading

import pytest

from pico_workqueue.exceptions import AbandonedTaskError, HandlerError
from pico_workqueue.task import Task, TaskHandle, TaskState, as_exception


class TestAsException:
    def test_exception_passthrough(self):
        error = ValueError("x")
        assert as_exception(error) is error

    def test_plain_value_wrapped(self):
        wrapped = as_exception("timeout")
        assert isinstance(wrapped, HandlerError)
        assert wrapped.error == "timeout"


class TestTaskHandle:
    def test_pending_state(self):
        handle = TaskHandle("p")
        assert handle.state is TaskState.PENDING
        assert not handle.done()
        with pytest.raises(asyncio.InvalidStateError):
            handle.result()
        with pytest.raises(asyncio.InvalidStateError):
            handle.exception()

    def test_finish_with_result(self):
        handle = TaskHandle("p")
        handle._finish(None, 5)
        assert handle.done()
        assert handle.result() == 5
        assert handle.exception() is None

    def test_finish_with_raw_error(self):
        handle = TaskHandle("p")
        handle._finish("boom", None)
        assert handle.error == "boom"
        with pytest.raises(HandlerError) as exc_info:
            handle.result()
        assert exc_info.value.error == "boom"

    def test_finish_only_once(self):
        handle = TaskHandle("p")
        handle._finish(None, 1)
        handle._finish(None, 2)
        assert handle.result() == 1

    def test_done_callback_before_and_after(self):
        seen = []
        handle = TaskHandle("p")
        handle.add_done_callback(lambda h: seen.append(("early", h.result())))
        handle._finish(None, 3)
        handle.add_done_callback(lambda h: seen.append(("late", h.result())))
        assert seen == [("early", 3), ("late", 3)]

    def test_abandon_skips_callbacks(self):
        seen = []
        handle = TaskHandle("p")
        handle.add_done_callback(seen.append)
        handle._abandon()
        handle.add_done_callback(seen.append)

        assert seen == []
        assert handle.abandoned
        assert handle.done()
        assert isinstance(handle.exception(), AbandonedTaskError)
        with pytest.raises(AbandonedTaskError):
            handle.result()

    def test_repr_shows_state(self):
        assert "pending" in repr(TaskHandle(1))

    @pytest.mark.asyncio
    async def test_await_result(self):
        handle = TaskHandle("p")
        asyncio.get_running_loop().call_soon(handle._finish, None, "ok")
        assert await handle == "ok"

    @pytest.mark.asyncio
    async def test_await_finished_handle(self):
        handle = TaskHandle("p")
        handle._finish(None, "ok")
        assert await handle == "ok"

    @pytest.mark.asyncio
    async def test_await_raises_error(self):
        handle = TaskHandle("p")
        asyncio.get_running_loop().call_soon(handle._finish, KeyError("k"), None)
        with pytest.raises(KeyError):
            await handle

    @pytest.mark.asyncio
    async def test_await_abandoned(self):
        handle = TaskHandle("p")
        asyncio.get_running_loop().call_soon(handle._abandon)
        with pytest.raises(AbandonedTaskError):
            await handle

    @pytest.mark.asyncio
    async def test_finish_from_other_thread(self):
        handle = TaskHandle("p")
        threading.Timer(0.01, handle._finish, args=(None, "threaded")).start()
        assert await asyncio.wait_for(handle, timeout=2) == "threaded"


class TestTask:
    def test_settle_calls_callback_then_handle(self):
        order = []
        handle = TaskHandle("p")
        handle.add_done_callback(lambda h: order.append("handle"))
        task = Task("p", callback=lambda err, res: order.append(("callback", err, res)), handle=handle)

        task.settle(None, 9)

        assert order == [("callback", None, 9), "handle"]
        assert task.callback is None

    def test_settle_with_context(self):
        seen = []
        ctx = object()
        task = Task("p", callback=lambda c, err, res: seen.append(c), context=ctx, handle=TaskHandle("p"))
        task.settle(None, None)
        assert seen == [ctx]

    def test_settle_with_none_context(self):
        seen = []
        task = Task("p", callback=lambda *args: seen.append(args), context=None, handle=TaskHandle("p"))
        task.settle(None, 1)
        assert seen == [(None, None, 1)]

    def test_settle_without_callback(self):
        task = Task("p", handle=TaskHandle("p"))
        task.settle(None, 1)
        assert task.handle.result() == 1

    def test_abandon(self):
        task = Task("p", callback=lambda err, res: None, handle=TaskHandle("p"))
        task.abandon()
        assert task.callback is None
        assert task.handle.abandoned
