"""Background execution for decode work.

Jobs run on a ``QThreadPool``; their results and progress reports are
emitted as Qt signals from a relay object that lives on the GUI thread, so
callbacks always run where the viewer state lives.
"""
from __future__ import annotations

from typing import Callable, Optional, Set

from qtpy import QtCore

from flipbook.utils.logger import logger

# job(report) -> result; report(int) sends a progress value.
Job = Callable[[Callable[[int], None]], object]
DoneCallback = Callable[[object, Optional[BaseException]], None]
ProgressCallback = Callable[[int], None]


def _noop_report(_value: int) -> None:
    return None


class InlineTaskRunner:
    """Runs jobs synchronously on the calling thread."""

    def submit(
        self,
        job: Job,
        on_done: DoneCallback,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        try:
            result = job(on_progress or _noop_report)
        except Exception as exc:
            on_done(None, exc)
            return
        on_done(result, None)

    def __call__(self, job: Callable[[], object], done: Callable[[object], None]) -> None:
        self.submit(lambda _report: job(), _done_or_log(done))


def _done_or_log(done: Callable[[object], None]) -> DoneCallback:
    def _on_done(result: object, error: Optional[BaseException]) -> None:
        if error is not None:
            logger.error("Background decode job failed: %s", error, exc_info=error)
            return
        done(result)

    return _on_done


class _Relay(QtCore.QObject):
    progress = QtCore.Signal(int)
    finished = QtCore.Signal(object, object)

    def __init__(
        self,
        on_done: DoneCallback,
        on_progress: Optional[ProgressCallback],
        release: Callable[["_Relay"], None],
    ) -> None:
        super().__init__()
        self._on_done = on_done
        self._on_progress = on_progress
        self._release = release
        self.progress.connect(self._deliver_progress)
        self.finished.connect(self._deliver_finished)

    @QtCore.Slot(int)
    def _deliver_progress(self, value: int) -> None:
        if self._on_progress is not None:
            self._on_progress(int(value))

    @QtCore.Slot(object, object)
    def _deliver_finished(self, result: object, error: object) -> None:
        try:
            self._on_done(result, error if isinstance(error, BaseException) else None)
        finally:
            self._release(self)


class _JobTask(QtCore.QRunnable):
    """Background task that runs one decode job."""

    def __init__(self, job: Job, relay: _Relay) -> None:
        super().__init__()
        self.job = job
        self.relay = relay

    def run(self) -> None:
        try:
            result = self.job(self.relay.progress.emit)
        except Exception as exc:
            self.relay.finished.emit(None, exc)
            return
        self.relay.finished.emit(result, None)


class ThreadPoolTaskRunner(QtCore.QObject):
    """Runs jobs on a ``QThreadPool`` and reports back on the GUI thread."""

    def __init__(
        self,
        parent: Optional[QtCore.QObject] = None,
        thread_pool: Optional[QtCore.QThreadPool] = None,
    ) -> None:
        super().__init__(parent)
        self._thread_pool = thread_pool or QtCore.QThreadPool(self)
        self._relays: Set[_Relay] = set()

    def submit(
        self,
        job: Job,
        on_done: DoneCallback,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        relay = _Relay(on_done, on_progress, self._relays.discard)
        # The relay is created here, on the GUI thread, so signals emitted by
        # the worker are queued back to this thread.
        self._relays.add(relay)
        self._thread_pool.start(_JobTask(job, relay))

    def __call__(self, job: Callable[[], object], done: Callable[[object], None]) -> None:
        self.submit(lambda _report: job(), _done_or_log(done))

    def pending(self) -> int:
        return len(self._relays)

    def wait_for_done(self, msecs: int = -1) -> bool:
        return bool(self._thread_pool.waitForDone(msecs))
