#!/usr/bin/env python3
"""Exception hierarchy for the leak scanner."""


class LeakScanError(Exception):
    """Base class for all scanner errors."""


class InputError(LeakScanError):
    """The target list could not be opened or read."""


class InvalidPatternError(LeakScanError):
    """A detection rule or rules file is malformed."""

    def __init__(self, message: str, pattern: str = None):
        super().__init__(message)
        self.pattern = pattern


class OutputError(LeakScanError):
    """The output file could not be opened for appending."""


class ConfigurationError(LeakScanError):
    """A configuration value is out of range."""


class TargetError(LeakScanError):
    """A failure confined to a single target. Never aborts the run."""

    action = "processing"

    def __init__(self, target: str, cause):
        self.target = target
        self.cause = cause
        super().__init__(f"Error {self.action} {target}: {cause}")


class FetchError(TargetError):
    """Connection, timeout, redirect or non-2xx status failure."""

    action = "fetching"


class ReadError(TargetError):
    """The response arrived but its body could not be read or decoded."""

    action = "reading response from"
