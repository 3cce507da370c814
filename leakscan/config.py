#!/usr/bin/env python3
"""Run configuration."""

import logging
from dataclasses import dataclass
from typing import Optional

from .dispatcher import DEFAULT_CONCURRENCY, validate_concurrency
from .errors import ConfigurationError
from .fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


@dataclass
class ScanConfig:
    """Already-parsed settings for one scan run."""
    targets_file: str
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT
    output_path: Optional[str] = None
    rules_path: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    use_color: bool = True
    log_level: str = 'WARNING'
    log_file: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "ScanConfig":
        return cls(
            targets_file=args.file,
            concurrency=args.threads,
            timeout=args.timeout,
            output_path=args.output,
            rules_path=args.rules,
            user_agent=args.user_agent,
            verify_ssl=not args.no_verify_ssl,
            use_color=not args.no_color,
            log_level=args.log_level,
            log_file=args.log_file,
        )

    def validate(self) -> "ScanConfig":
        """
        Raises:
            ConfigurationError: on a missing targets file, a non-positive
                concurrency or timeout, or an unknown log level
        """
        if not self.targets_file:
            raise ConfigurationError("A file with URLs is required")
        validate_concurrency(self.concurrency)
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout!r}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level {self.log_level!r}")
        return self


def configure_logging(config: ScanConfig) -> None:
    log_level = getattr(logging, config.log_level)
    if config.log_file:
        logging.basicConfig(filename=config.log_file, level=log_level, format=LOG_FORMAT)
    else:
        logging.basicConfig(level=log_level, format=LOG_FORMAT)
