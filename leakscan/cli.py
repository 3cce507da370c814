#!/usr/bin/env python3
"""Command-line interface for the leak scanner."""

import sys
import logging
import argparse
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

from .config import LOG_LEVELS, ScanConfig, configure_logging
from .dispatcher import DEFAULT_CONCURRENCY
from .errors import LeakScanError
from .fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .scanner import LeakScanner


class LeakScannerCLI:
    """Command-line interface for the bulk URL leak scanner."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog='leakscan',
            description="Leak Scanner - Fetch a list of URLs and flag exposed API keys and tokens",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )

        input_group = parser.add_argument_group('Input Options')
        input_group.add_argument('-f', '--file', required=True, help='File containing URLs to scan (one per line)')
        input_group.add_argument('--rules', help='JSON file of detection rules (replaces the built-in rules)')

        scan_group = parser.add_argument_group('Scanning Options')
        scan_group.add_argument('-t', '--threads', type=int, default=DEFAULT_CONCURRENCY,
                                help='Number of concurrent requests')
        scan_group.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, help='HTTP request timeout in seconds')
        scan_group.add_argument('--user-agent', default=DEFAULT_USER_AGENT, help='User agent string')
        scan_group.add_argument('--no-verify-ssl', action='store_true', help='Disable SSL certificate verification')

        output_group = parser.add_argument_group('Output Options')
        output_group.add_argument('-o', '--output', help='File to append alerts to (created if missing)')
        output_group.add_argument('--no-color', action='store_true', help='Disable colored terminal output')

        log_group = parser.add_argument_group('Logging Options')
        log_group.add_argument('--log-level', choices=list(LOG_LEVELS), default='WARNING', help='Logging level')
        log_group.add_argument('--log-file', help='Log file path')

        return parser

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run a scan with the given arguments.

        Args:
            args: Command-line arguments (if None, sys.argv is used)

        Returns:
            Exit code: 0 once every target is processed, 1 on a fatal
            error, 130 when interrupted
        """
        args = self.parser.parse_args(args)

        try:
            config = ScanConfig.from_args(args).validate()
            configure_logging(config)

            scanner = LeakScanner(config)
            summary = scanner.scan_file()
            print(summary.format())
            return 0

        except LeakScanError as e:
            logging.debug(f"Fatal error: {e}")
            message = str(e) if args.no_color else f"{Fore.RED}{e}{Style.RESET_ALL}"
            print(message, file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            print("\nScan interrupted by user.")
            return 130


def main():
    """Main entry point for the leak scanner."""
    colorama_init()
    cli = LeakScannerCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
