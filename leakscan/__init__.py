"""Bulk URL leak scanner: fetch many URLs concurrently and flag exposed secrets."""

from .dispatcher import Dispatcher
from .errors import (
    ConfigurationError,
    FetchError,
    InputError,
    InvalidPatternError,
    LeakScanError,
    OutputError,
    ReadError,
    TargetError,
)
from .fetcher import Fetcher
from .matcher import Finding, scan
from .patterns import DetectionRule, PatternSet, Severity, load_rules
from .progress import ProgressTracker
from .reporter import Reporter

__version__ = "1.0.0"
