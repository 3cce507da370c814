#!/usr/bin/env python3
"""
Detection rules and the compiled pattern set.

A rule is a pattern string paired with a severity. Rules whose text contains
none of the regex metacharacters in METACHARACTERS are matched as literal
substrings; anything else is compiled as a regular expression. A literal rule
that happens to contain one of those characters (a stray "+" or "(") is
therefore read as an expression, which may silently stop it from matching.
"""

import re
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import InvalidPatternError


logger = logging.getLogger(__name__)

METACHARACTERS = "[{(|?*+^$"


class Severity(Enum):
    """Severity assigned to a detection rule."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value: Union["Severity", str]) -> "Severity":
        """Accept a Severity or a case-insensitive label such as 'high'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise InvalidPatternError(f"Unknown severity: {value!r}")

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class DetectionRule:
    """A raw pattern and the severity reported for its matches."""
    pattern: str
    severity: Severity

    @property
    def is_literal(self) -> bool:
        return not any(c in self.pattern for c in METACHARACTERS)


@dataclass(frozen=True)
class CompiledRule:
    rule: DetectionRule
    regex: re.Pattern


# Built-in rule table. Every value is captured up to the first quote, colon,
# semicolon, comma or whitespace.
DEFAULT_RULES: Dict[str, str] = {
    r'affirm[-_]?private\s*[:="\'\s]*\s*([a-zA-Z0-9_\-]{8,}[^\'":;\s,]*)': "High",
    r'app[-_]?token\s*[:="\'\s]*\s*([a-zA-Z0-9_\-]{8,}[^\'":;\s,]*)': "High",
    r'map[-_]?box\s*[:="\'\s]*\s*([a-zA-Z0-9_\-]{8,}[^\'":;\s,]*)': "High",
    r'private[-_]?token\s*[:="\'\s]*\s*([a-zA-Z0-9_\-]{8,}[^\'":;\s,]*)': "High",
    r'api[-_]?key\s*[:="\'\s]*\s*([a-zA-Z0-9_\-]{8,}[^\'":;\s,]*)': "High",
}


def compile_rule(rule: DetectionRule) -> CompiledRule:
    """
    Compile a single rule, case-insensitively.

    Raises:
        InvalidPatternError: if the pattern is empty or not a valid expression
    """
    if not rule.pattern:
        raise InvalidPatternError("Empty detection pattern", pattern=rule.pattern)

    source = rule.pattern if not rule.is_literal else re.escape(rule.pattern)
    try:
        regex = re.compile(source, re.IGNORECASE)
    except re.error as e:
        raise InvalidPatternError(f"Invalid detection pattern {rule.pattern!r}: {e}",
                                  pattern=rule.pattern) from e
    return CompiledRule(rule=rule, regex=regex)


class PatternSet:
    """Immutable, ordered collection of compiled detection rules."""

    def __init__(self, compiled: Iterable[CompiledRule]):
        self._compiled: Tuple[CompiledRule, ...] = tuple(compiled)

    @classmethod
    def compile(cls, rules: Iterable[Tuple[str, Union[Severity, str]]]) -> "PatternSet":
        """
        Build a pattern set from ordered (pattern, severity) pairs.

        Pattern text is the key: if it repeats, the last severity wins and the
        rule keeps its first position.

        Args:
            rules: (raw pattern, severity or severity label) pairs

        Returns:
            The compiled PatternSet

        Raises:
            InvalidPatternError: on a malformed pattern or unknown severity
        """
        by_pattern: Dict[str, Severity] = {}
        for raw, severity in rules:
            if not isinstance(raw, str):
                raise InvalidPatternError(f"Detection pattern must be text, got {raw!r}")
            parsed = Severity.parse(severity)
            if raw in by_pattern:
                logger.warning(f"Duplicate detection pattern {raw!r}, using severity {parsed.label}")
            by_pattern[raw] = parsed

        return cls(compile_rule(DetectionRule(pattern, severity))
                   for pattern, severity in by_pattern.items())

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Union[Severity, str]]) -> "PatternSet":
        return cls.compile(mapping.items())

    @classmethod
    def default(cls) -> "PatternSet":
        return cls.from_mapping(DEFAULT_RULES)

    def __len__(self) -> int:
        return len(self._compiled)

    def __iter__(self) -> Iterator[DetectionRule]:
        return (c.rule for c in self._compiled)

    def compiled(self) -> Tuple[CompiledRule, ...]:
        return self._compiled

    def severity_of(self, pattern: str) -> Optional[Severity]:
        for compiled in self._compiled:
            if compiled.rule.pattern == pattern:
                return compiled.rule.severity
        return None

    def __repr__(self) -> str:
        return f"PatternSet({len(self)} rules)"


def _parse_rule_document(document) -> List[Tuple[str, str]]:
    if isinstance(document, dict):
        return list(document.items())

    if isinstance(document, list):
        rules = []
        for i, entry in enumerate(document):
            if not isinstance(entry, dict) or 'pattern' not in entry or 'severity' not in entry:
                raise InvalidPatternError(
                    f"Rule #{i + 1} must be an object with 'pattern' and 'severity' keys")
            rules.append((entry['pattern'], entry['severity']))
        return rules

    raise InvalidPatternError("Rules file must hold a JSON object or a list of rule objects")


def load_rules(filepath: str) -> PatternSet:
    """
    Load detection rules from a JSON file.

    Two layouts are accepted:
        {"api[-_]?key...": "High", "password": "Low"}
        [{"pattern": "api[-_]?key...", "severity": "High"}]

    Args:
        filepath: Path to the rules file

    Returns:
        The compiled PatternSet

    Raises:
        InvalidPatternError: if the file is unreadable, not JSON, or holds a bad rule
    """
    logger.info(f"Loading detection rules from {filepath}")
    try:
        with open(filepath, 'r', encoding='utf-8') as file:
            document = json.load(file)
    except (IOError, OSError) as e:
        raise InvalidPatternError(f"Cannot read rules file {filepath}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidPatternError(f"Rules file {filepath} is not valid JSON: {e}") from e

    patterns = PatternSet.compile(_parse_rule_document(document))
    logger.info(f"Loaded {len(patterns)} detection rules")
    return patterns
