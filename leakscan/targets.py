#!/usr/bin/env python3
"""Reading the target URL list."""

import logging
from typing import Iterable, List

from .errors import InputError


logger = logging.getLogger(__name__)


def clean_targets(lines: Iterable[str]) -> List[str]:
    """Trim each line and drop blanks. URLs are not validated here."""
    return [line.strip() for line in lines if line.strip()]


def read_targets(filepath: str) -> List[str]:
    """
    Read URLs from a text file, one per line.

    Args:
        filepath: Path to the URL list

    Returns:
        Non-empty, trimmed URLs in file order

    Raises:
        InputError: if the file cannot be opened or read
    """
    logger.info(f"Reading URLs from file: {filepath}")
    try:
        with open(filepath, 'r', encoding='utf-8') as file:
            urls = clean_targets(file)
    except (IOError, OSError, UnicodeDecodeError) as e:
        raise InputError(f"Error reading file {filepath}: {e}") from e

    logger.info(f"Found {len(urls)} URLs in file")
    return urls
