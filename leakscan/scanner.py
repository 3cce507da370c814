#!/usr/bin/env python3
"""
Bulk URL leak scanner.

Wires the target list, detection rules, fetcher, reporter and dispatcher into
one run. Fatal problems (unreadable target list, bad rules, unwritable output
file) are raised before any request is sent; per-target failures are
reported inline and never stop the run.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import ScanConfig
from .dispatcher import Dispatcher
from .fetcher import Fetcher
from .patterns import PatternSet, Severity, load_rules
from .reporter import Reporter
from .targets import read_targets


@dataclass
class ScanSummary:
    """Totals for a finished run."""
    processed: int
    total: int
    failures: int
    findings: int
    by_severity: Dict[Severity, int] = field(default_factory=dict)

    def format(self) -> str:
        text = f"{self.processed}/{self.total} URLs processed, {self.failures} failed, {self.findings} findings"
        severities = ", ".join(f"{s.label}: {self.by_severity[s]}"
                               for s in Severity if self.by_severity.get(s))
        if severities:
            text += f" ({severities})"
        return text


class LeakScanner:
    """Runs a full scan from a ScanConfig."""

    def __init__(self,
                 config: ScanConfig,
                 patterns: Optional[PatternSet] = None,
                 fetcher: Optional[Fetcher] = None,
                 reporter: Optional[Reporter] = None):
        """
        Args:
            config: Validated run configuration
            patterns: Detection rules; loaded from config.rules_path or the
                built-in table when omitted
            fetcher: HTTP fetcher; built from the config when omitted
            reporter: Output sink; console plus config.output_path when omitted
        """
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.patterns = patterns if patterns is not None else self._load_patterns()
        self.fetcher = fetcher
        self.reporter = reporter or Reporter(output_path=config.output_path, use_color=config.use_color)

    def _load_patterns(self) -> PatternSet:
        if self.config.rules_path:
            return load_rules(self.config.rules_path)
        return PatternSet.default()

    def _build_fetcher(self) -> Fetcher:
        return Fetcher(
            timeout=self.config.timeout,
            user_agent=self.config.user_agent,
            verify_ssl=self.config.verify_ssl,
            pool_size=self.config.concurrency,
        )

    def scan_file(self) -> ScanSummary:
        """
        Read the configured target file and scan every URL in it.

        Raises:
            InputError: if the target file cannot be read
            OutputError: if the output file cannot be opened
        """
        targets = read_targets(self.config.targets_file)
        return self.scan_urls(targets)

    def scan_urls(self, targets: List[str]) -> ScanSummary:
        """Scan the given URLs and return the run's totals."""
        owns_fetcher = self.fetcher is None
        fetcher = self._build_fetcher() if owns_fetcher else self.fetcher

        try:
            with self.reporter:
                dispatcher = Dispatcher(
                    fetcher,
                    self.patterns,
                    timeout=self.config.timeout,
                    on_error=self.reporter.report_error,
                    on_progress=self.reporter.render_progress,
                )
                self.reporter.render_progress(0, len(targets))
                progress = dispatcher.run(targets, self.config.concurrency, self.reporter.report_finding)
                self.reporter.finish()
        finally:
            if owns_fetcher:
                fetcher.close()

        processed, total = progress.snapshot()
        return ScanSummary(
            processed=processed,
            total=total,
            failures=progress.failures,
            findings=self.reporter.finding_count,
            by_severity=self.reporter.severity_counts,
        )
