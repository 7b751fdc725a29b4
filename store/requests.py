"""
Run language-model calls off the editing path.

Each call is tagged with a ``RequestToken`` taken from the store when it is
submitted. When the call finishes, its result is delivered only if the store
still holds the same revision and tier; otherwise the response belongs to a
superseded snapshot and is dropped.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from schemas.resume import ApplicantRecord

from .record_store import RecordStore, RequestToken

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 90.0


class CallTimeout(TimeoutError):
    pass


class PendingCall:
    def __init__(self, token: RequestToken, future: Future):
        self.token = token
        self.future = future
        self.delivered: Optional[str] = None  # "result", "error", "stale" or "cancelled"
        self._done = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> None:
        self._claim("cancelled")
        self.future.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the call has been delivered, dropped or cancelled."""
        return self._done.wait(timeout)

    def _claim(self, outcome: str) -> bool:
        with self._lock:
            if self.delivered is not None:
                return False
            self.delivered = outcome
        if outcome in ("stale", "cancelled"):
            self._done.set()
        return True

    def _finish(self) -> None:
        self._done.set()


class BackgroundCalls:
    def __init__(self, store: RecordStore, *, max_workers: int = 2, timeout: float = DEFAULT_TIMEOUT):
        self.store = store
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="llm-call")

    def token(self) -> RequestToken:
        return self.store.token()

    def is_current(self, token: RequestToken) -> bool:
        return token == self.token()

    def submit(
        self,
        call: Callable[[ApplicantRecord], Any],
        on_result: Callable[[Any], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> PendingCall:
        """
        Run ``call(snapshot)`` in the background. ``on_result`` / ``on_error`` are
        invoked from a worker thread, and only while the token is still current.
        """
        token = self.token()
        snapshot = self.store.snapshot()
        pending = PendingCall(token, self._executor.submit(call, snapshot))
        limit = self.timeout if timeout is None else timeout

        def deliver(outcome: str, payload: Any) -> None:
            if not self.is_current(token):
                if pending._claim("stale"):
                    logger.info(
                        "Discarding %s for superseded revision %s (now %s)",
                        outcome,
                        token.revision,
                        self.store.revision,
                    )
                return
            if not pending._claim(outcome):
                return
            try:
                if outcome == "result":
                    on_result(payload)
                elif on_error is not None:
                    on_error(payload)
                else:
                    logger.warning("Background call failed: %s", payload)
            finally:
                pending._finish()

        timer = threading.Timer(
            limit, lambda: deliver("error", CallTimeout(f"Call timed out after {limit:.0f}s"))
        )
        timer.daemon = True

        def done(future: Future) -> None:
            timer.cancel()
            if future.cancelled():
                return
            exc = future.exception()
            if exc is not None:
                deliver("error", exc)
            else:
                deliver("result", future.result())

        timer.start()
        pending.future.add_done_callback(done)
        return pending

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
