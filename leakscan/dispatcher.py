#!/usr/bin/env python3
"""Bounded-concurrency fan-out of fetch and scan work across targets."""

import logging
import threading
import concurrent.futures
from typing import Callable, Iterable, Optional

from .errors import ConfigurationError, TargetError
from .matcher import Finding, scan
from .patterns import PatternSet
from .progress import ProgressListener, ProgressTracker


DEFAULT_CONCURRENCY = 10

FindingCallback = Callable[[Finding], None]
ErrorCallback = Callable[[TargetError], None]


def validate_concurrency(concurrency) -> int:
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ConfigurationError(f"concurrency must be a positive integer, got {concurrency!r}")
    return concurrency


class Dispatcher:
    """
    Runs Fetcher + Matcher over every target with at most N in flight.

    A bounded semaphore is acquired before each target is handed to the
    thread pool and released when that target's worker finishes, whatever the
    outcome. The submitting loop therefore never holds more than N targets,
    which keeps memory flat for very long target lists.
    """

    def __init__(self,
                 fetcher,
                 patterns: PatternSet,
                 timeout: Optional[float] = None,
                 on_error: Optional[ErrorCallback] = None,
                 on_progress: Optional[ProgressListener] = None):
        """
        Args:
            fetcher: Object with fetch(target, timeout) -> str
            patterns: Compiled detection rules, shared read-only by all workers
            timeout: Per-request timeout passed to the fetcher (None keeps its default)
            on_error: Called once for each target that fails
            on_progress: Called with (processed, total) after each target
        """
        self.fetcher = fetcher
        self.patterns = patterns
        self.timeout = timeout
        self.on_error = on_error
        self.on_progress = on_progress
        self.logger = logging.getLogger(__name__)

    def run(self,
            targets: Iterable[str],
            concurrency: int = DEFAULT_CONCURRENCY,
            on_finding: Optional[FindingCallback] = None) -> ProgressTracker:
        """
        Process every target exactly once and block until all are done.

        Args:
            targets: Ordered URLs to scan
            concurrency: Maximum number of targets in flight
            on_finding: Called for every finding as soon as it is produced

        Returns:
            The run's ProgressTracker, complete when this returns

        Raises:
            ConfigurationError: if concurrency is not a positive integer
        """
        concurrency = validate_concurrency(concurrency)
        targets = list(targets)
        progress = ProgressTracker(len(targets), listener=self.on_progress)
        gate = threading.BoundedSemaphore(concurrency)

        self.logger.info(f"Starting scan of {len(targets)} URLs with {concurrency} workers")

        with concurrent.futures.ThreadPoolExecutor(max_workers=concurrency,
                                                   thread_name_prefix='leakscan') as executor:
            for target in targets:
                gate.acquire()
                try:
                    future = executor.submit(self._process, target, on_finding, progress, gate)
                except BaseException:
                    gate.release()
                    raise
                future.add_done_callback(self._log_worker_failure)

        processed, total = progress.snapshot()
        self.logger.info(f"Completed scanning {processed}/{total} URLs ({progress.failures} failed)")
        return progress

    def _process(self,
                 target: str,
                 on_finding: Optional[FindingCallback],
                 progress: ProgressTracker,
                 gate: threading.BoundedSemaphore) -> None:
        failed = False
        try:
            body = self.fetcher.fetch(target, self.timeout)
            for finding in scan(target, body, self.patterns):
                if on_finding is not None:
                    on_finding(finding)
        except TargetError as e:
            failed = True
            self.logger.debug(str(e))
            self._report_error(e)
        except Exception as e:
            failed = True
            self.logger.error(f"Unexpected error scanning {target}: {e}")
            self._report_error(TargetError(target, e))
        finally:
            try:
                progress.advance(failed=failed)
            finally:
                gate.release()

    def _log_worker_failure(self, future: concurrent.futures.Future) -> None:
        error = future.exception()
        if error is not None:
            self.logger.error(f"Worker failed: {error}")

    def _report_error(self, error: TargetError) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(error)
        except Exception as e:
            self.logger.error(f"Error handler failed for {error.target}: {e}")
