# assessments/timer.py
"""
Attempt countdown.

Remaining time is always derived from wall-clock time since `started_at`;
a countdown only nudges submission, it never owns the clock.
"""
import logging
import threading

logger = logging.getLogger(__name__)


def remaining_seconds(started_at, duration_seconds, now):
    """
    Seconds left on an attempt, never negative.

    A missing `started_at` grants the full duration instead of failing.
    """
    if started_at is None:
        return max(0, int(duration_seconds))
    try:
        elapsed = int((now - started_at).total_seconds())
    except (TypeError, AttributeError):
        logger.warning("Unusable started_at %r, granting full duration", started_at)
        return max(0, int(duration_seconds))
    return max(0, int(duration_seconds) - elapsed)


class AttemptCountdown:
    """
    One-second ticker for an in-progress attempt.

    `on_expire` is called at most once, when the count reaches zero, unless
    the countdown was cancelled or `is_open()` says the attempt is closed.
    """

    interval = 1.0

    def __init__(self, remaining, on_expire, is_open=None):
        self.remaining = max(0, int(remaining))
        self._on_expire = on_expire
        self._is_open = is_open or (lambda: True)
        self._cancelled = threading.Event()
        self._fired = False
        self._lock = threading.Lock()
        self._thread = None

    @property
    def cancelled(self):
        return self._cancelled.is_set()

    @property
    def fired(self):
        return self._fired

    def tick(self):
        """Advance one second. Returns the remaining seconds after the tick."""
        with self._lock:
            if self.cancelled or self._fired:
                return self.remaining
            if self.remaining > 0:
                self.remaining -= 1
            if self.remaining == 0:
                self._expire()
            return self.remaining

    def _expire(self):
        self._fired = True
        if not self._is_open():
            logger.debug("Countdown reached zero on a closed attempt, not submitting")
            return
        self._on_expire()

    def start(self):
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run, name="attempt-countdown", daemon=True)
        self._thread.start()
        return self

    def _run(self):
        if self.remaining == 0:
            with self._lock:
                if not self.cancelled and not self._fired:
                    self._expire()
            return
        while not self._cancelled.wait(self.interval):
            if self.tick() == 0:
                return

    def cancel(self):
        self._cancelled.set()

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)
