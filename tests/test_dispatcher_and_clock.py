"""
Unit tests for call dispatchers and TimerClock
"""
import threading

from PyQt6.QtCore import QThread

from pomodoro_sync.Modules.Pomodoro_module import (
    ThreadedDispatcher,
    InlineDispatcher,
    TimerClock,
    SessionConflictError,
)
from pomodoro_sync.Modules.Pomodoro_module.call_dispatcher import run_call

from qt_helpers import wait_until


def fail_with_conflict():
    raise SessionConflictError("busy", status_code=400)


class TestRunCall:

    def test_success(self):
        response = run_call(lambda: 42)
        assert response.success
        assert response.data == 42

    def test_domain_error_kept(self):
        response = run_call(fail_with_conflict)
        assert not response.success
        assert isinstance(response.exception, SessionConflictError)
        assert response.status_code == 400
        assert response.error == "busy"

    def test_unexpected_error_wrapped(self):
        response = run_call(lambda: 1 / 0)
        assert not response.success
        assert isinstance(response.exception, ZeroDivisionError)


class TestInlineDispatcher:

    def test_callback_runs_synchronously(self):
        results = []
        InlineDispatcher().submit(lambda: "ok", results.append)
        assert results[0].data == "ok"


class TestThreadedDispatcher:

    def test_runs_off_main_thread_and_calls_back_on_main(self):
        dispatcher = ThreadedDispatcher()
        main_thread = threading.get_ident()
        worker_threads = []
        callback_threads = []
        results = []

        def call():
            worker_threads.append(threading.get_ident())
            return "done"

        def on_result(response):
            callback_threads.append(threading.get_ident())
            results.append(response)

        dispatcher.submit(call, on_result)

        assert wait_until(lambda: results)
        assert results[0].success and results[0].data == "done"
        assert worker_threads[0] != main_thread
        assert callback_threads[0] == main_thread
        assert dispatcher.pending_count == 0

    def test_errors_are_delivered(self):
        dispatcher = ThreadedDispatcher()
        results = []

        dispatcher.submit(fail_with_conflict, results.append)

        assert wait_until(lambda: results)
        assert isinstance(results[0].exception, SessionConflictError)

    def test_shutdown_waits_for_workers(self):
        dispatcher = ThreadedDispatcher()
        dispatcher.submit(lambda: QThread.msleep(50))
        dispatcher.shutdown()
        assert dispatcher.pending_count == 0


class TestTimerClock:

    def test_start_stop(self):
        clock = TimerClock(interval_ms=1000)
        assert not clock.is_active()

        clock.start()
        assert clock.is_active()

        clock.stop()
        assert not clock.is_active()

    def test_restart_is_idempotent(self):
        clock = TimerClock(interval_ms=1000)
        clock.start()
        clock.start()
        assert clock.is_active()
        clock.stop()
        assert not clock.is_active()

    def test_ticks(self):
        clock = TimerClock(interval_ms=10)
        ticks = []
        clock.tick.connect(lambda: ticks.append(1))

        clock.start()
        assert wait_until(lambda: len(ticks) >= 3)
        clock.stop()
