#!/usr/bin/env python3
"""Console and file output for findings, per-target errors and progress."""

import sys
import logging
import threading
from collections import Counter
from typing import Dict, Optional, TextIO

from colorama import Fore, Style, ansi

from .errors import OutputError, TargetError
from .matcher import Finding
from .patterns import Severity


def severity_color(severity: Severity) -> str:
    return Fore.RED if severity is Severity.HIGH else Fore.GREEN


def format_alert(finding: Finding, use_color: bool = True) -> str:
    """
    Render one finding as an alert block.

    Args:
        finding: The finding to render
        use_color: Whether to include terminal color codes

    Returns:
        Multi-line alert text ending in a newline
    """
    if not use_color:
        return (
            f"[ALERT] Found sensitive data in {finding.target}\n"
            f"Match: {finding.matched_text}\n"
            f"Severity: {finding.severity.label}\n"
            f"Regex Pattern: {finding.rule.pattern}\n"
        )

    return (
        f"{Fore.RED}[ALERT]{Style.RESET_ALL} Found sensitive data in {Fore.CYAN}{finding.target}{Style.RESET_ALL}\n"
        f"Match: {Fore.YELLOW}{finding.matched_text}{Style.RESET_ALL}\n"
        f"Severity: {severity_color(finding.severity)}{finding.severity.label}{Style.RESET_ALL}\n"
        f"Regex Pattern: {Fore.BLUE}{finding.rule.pattern}{Style.RESET_ALL}\n"
    )


def format_progress(processed: int, total: int) -> str:
    return f"\r{ansi.clear_line()}Progress: [{processed}/{total}]"


class Reporter:
    """
    Writes alerts to the console and, optionally, appends them to a file.

    Every write happens under one lock, so an alert, an error line or a
    progress redraw is never interleaved with another thread's output. After
    an alert or error the last known progress line is redrawn.
    """

    def __init__(self,
                 stream: Optional[TextIO] = None,
                 output_path: Optional[str] = None,
                 use_color: bool = True):
        """
        Args:
            stream: Console stream, stdout by default
            output_path: File that receives every alert, opened in append mode
            use_color: Whether console output carries color codes
        """
        self.stream = stream or sys.stdout
        self.output_path = output_path
        self.use_color = use_color
        self.logger = logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._output_file = None
        self._last_progress: Optional[str] = None
        self._severity_counts: Counter = Counter()
        self._error_count = 0

    def open(self) -> "Reporter":
        """
        Open the output file, creating it if it does not exist.

        Raises:
            OutputError: if the file cannot be opened for appending
        """
        if self.output_path and self._output_file is None:
            try:
                self._output_file = open(self.output_path, 'a', encoding='utf-8')
            except (IOError, OSError) as e:
                raise OutputError(f"Error opening output file {self.output_path}: {e}") from e
            self.logger.info(f"Appending alerts to {self.output_path}")
        return self

    def close(self) -> None:
        with self._lock:
            if self._output_file is not None:
                self._output_file.close()
                self._output_file = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def report_finding(self, finding: Finding) -> None:
        """Print the colored alert and append its uncolored form to the output file."""
        console_alert = format_alert(finding, self.use_color)
        with self._lock:
            self._severity_counts[finding.severity] += 1
            self._write_above_progress(console_alert)
            if self._output_file is not None:
                self._output_file.write("\n" + format_alert(finding, use_color=False))
                self._output_file.flush()

    def report_error(self, error: TargetError) -> None:
        with self._lock:
            self._error_count += 1
            self._write_above_progress(f"{error}\n")

    def render_progress(self, processed: int, total: int) -> None:
        line = format_progress(processed, total)
        with self._lock:
            self._last_progress = line
            self.stream.write(line)
            self.stream.flush()

    def finish(self, message: str = "Scanning completed!") -> None:
        with self._lock:
            self.stream.write(f"\n{message}\n")
            self.stream.flush()

    def print_message(self, message: str) -> None:
        with self._lock:
            self._write_above_progress(f"{message}\n")

    @property
    def severity_counts(self) -> Dict[Severity, int]:
        with self._lock:
            return dict(self._severity_counts)

    @property
    def finding_count(self) -> int:
        with self._lock:
            return sum(self._severity_counts.values())

    @property
    def error_count(self) -> int:
        with self._lock:
            return self._error_count

    def _write_above_progress(self, text: str) -> None:
        # Caller holds self._lock
        if self._last_progress is not None:
            self.stream.write(f"\r{ansi.clear_line()}")
        self.stream.write(text)
        if self._last_progress is not None:
            self.stream.write(self._last_progress)
        self.stream.flush()
