"""
Poll scheduler - serialized, self-rescheduling fetch loop.

Runs the task once on start, then arms a single timer for the next run only
after the current run (including its error handling) has finished. Two runs
never overlap: a trigger that arrives mid-run is folded into one immediate
rerun once the current run returns. An interval change applies from the
next arming on.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PollScheduler:
    """
    Drives periodic re-fetch with a user-adjustable interval.

    timer_factory has threading.Timer's signature: (interval, function) and
    returns an object with start() and cancel().
    """

    def __init__(
        self,
        task: Callable[[], object],
        interval: float,
        timer_factory: Callable[[float, Callable[[], None]], object] = threading.Timer,
    ):
        self.task = task
        self._interval = self._validate(interval)
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._timer = None
        self._running = False
        self._in_flight = False
        self._rerun = False

        # Statistics
        self._run_count = 0
        self._error_count = 0

    @staticmethod
    def _validate(interval: float) -> float:
        interval = float(interval)
        if interval <= 0:
            raise ValueError(f'Poll interval must be positive, got {interval}')
        return interval

    @property
    def interval(self) -> float:
        return self._interval

    def set_interval(self, interval: float) -> None:
        """Change the interval; a timer already armed keeps its old delay."""
        self._interval = self._validate(interval)
        logger.info(f'Poll interval set to {self._interval}s')

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Run the task now and keep polling until stop()."""
        with self._lock:
            if self._running:
                logger.warning('Poll scheduler already running')
                return
            self._running = True
        logger.info(f'Starting poll loop (interval={self._interval}s)')
        self._run()

    def stop(self) -> None:
        """Cancel the pending run. A run in progress finishes but is not rescheduled."""
        with self._lock:
            self._running = False
            self._rerun = False
            self._cancel_timer()
        logger.info('Poll loop stopped')

    def trigger_now(self) -> None:
        """
        Drop the pending timer and run immediately, (re)starting the loop.

        While a run is in progress this only requests a rerun right after it.
        """
        with self._lock:
            self._running = True
            if self._in_flight:
                self._rerun = True
                return
            self._cancel_timer()
        self._run()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run(self) -> None:
        with self._lock:
            if not self._running:
                return
            if self._in_flight:
                # A stale timer fired while another run is going
                self._rerun = True
                return
            self._in_flight = True

        while True:
            self._execute()
            with self._lock:
                if self._rerun and self._running:
                    self._rerun = False
                    continue
                self._rerun = False
                self._in_flight = False
                self._schedule_next()
                return

    def _execute(self) -> None:
        try:
            self._run_count += 1
            self.task()
        except Exception as e:
            self._error_count += 1
            logger.error(f'Poll task failed: {e}')

    def _schedule_next(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._cancel_timer()
            self._timer = self._timer_factory(self._interval, self._run)
            # Timer threads must not keep the interpreter alive
            if hasattr(self._timer, 'daemon'):
                self._timer.daemon = True
            self._timer.start()

    @property
    def stats(self) -> dict:
        return {
            'run_count': self._run_count,
            'error_count': self._error_count,
            'interval': self._interval,
            'running': self._running,
        }
