"""Fixed-interval scheduling of forwarding runs"""
import logging
import signal
import time

logger = logging.getLogger(__name__)


class ForwardingScheduler:
    """
    Runs a job every interval_minutes until the schedule is removed

    Runs never overlap: the next interval starts counting once the current
    run returns. A run that raises is logged with its traceback and the
    schedule carries on; unread mail is picked up again on the next tick.
    """

    def __init__(self, job, interval_minutes=30, sleep=time.sleep, poll_seconds=10):
        if interval_minutes < 1:
            raise ValueError(f"interval_minutes must be at least 1, got {interval_minutes}")
        self.job = job
        self.interval = interval_minutes * 60
        self.poll_seconds = poll_seconds
        self._sleep = sleep
        self.running = False
        self.runs_completed = 0
        self.runs_failed = 0

    def _run_once(self):
        try:
            self.job()
        except Exception:
            self.runs_failed += 1
            logger.exception("Scheduled forwarding run failed")
        finally:
            self.runs_completed += 1

    def _handle_shutdown(self, signum, frame):
        logger.info(f"Received signal {signum}, removing schedule...")
        self.remove()

    def install_signal_handlers(self):
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

    def install(self, max_runs=None):
        """
        Run the job now and then on every interval

        Blocks until remove() is called or max_runs runs have completed.
        """
        logger.info(f"Schedule installed: forwarding every {self.interval // 60} minutes")
        self.running = True

        while self.running:
            self._run_once()
            if max_runs is not None and self.runs_completed >= max_runs:
                break

            # Sleep in small increments to respond to remove() quickly
            remaining = self.interval
            while remaining > 0 and self.running:
                step = min(remaining, self.poll_seconds)
                self._sleep(step)
                remaining -= step

        self.running = False
        logger.info(
            f"Schedule removed after {self.runs_completed} runs "
            f"({self.runs_failed} failed)"
        )

    def remove(self):
        self.running = False
