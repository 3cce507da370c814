#!/usr/bin/env python3
"""Apply a PatternSet to a response body."""

from dataclasses import dataclass
from typing import Iterator

from .patterns import DetectionRule, PatternSet, Severity


@dataclass(frozen=True)
class Finding:
    """One match of one rule in one target's body."""
    target: str
    matched_text: str
    severity: Severity
    rule: DetectionRule

    def to_dict(self) -> dict:
        return {
            'target': self.target,
            'match': self.matched_text,
            'severity': self.severity.label,
            'pattern': self.rule.pattern,
        }


def scan(target: str, body: str, patterns: PatternSet) -> Iterator[Finding]:
    """
    Lazily yield every finding in a body.

    Each rule runs independently over the whole body and reports all of its
    non-overlapping matches in document order. Rules are visited in the
    pattern set's order.

    Args:
        target: URL the body came from
        body: Decoded response text
        patterns: Compiled detection rules

    Yields:
        Finding for each match occurrence
    """
    if not body:
        return

    for compiled in patterns.compiled():
        for match in compiled.regex.finditer(body):
            text = match.group(0)
            if not text:
                continue
            yield Finding(
                target=target,
                matched_text=text,
                severity=compiled.rule.severity,
                rule=compiled.rule,
            )
