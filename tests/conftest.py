"""Shared fixtures for the leak scanner tests."""

import io
import threading
import time
from typing import Dict, Union

import pytest

from leakscan.errors import FetchError
from leakscan.patterns import PatternSet
from leakscan.reporter import Reporter


API_KEY_RULE = r'api[-_]?key\s*[:=]\s*([a-zA-Z0-9_\-]{8,})'


class StubFetcher:
    """In-memory fetcher that records how many calls overlap."""

    def __init__(self, bodies: Dict[str, Union[str, Exception]] = None, delay: float = 0.0):
        self.bodies = bodies or {}
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self.closed = False
        self._lock = threading.Lock()

    def fetch(self, target, timeout=None):
        with self._lock:
            self.calls.append(target)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            body = self.bodies.get(target, "")
            if isinstance(body, Exception):
                raise body
            return body
        finally:
            with self._lock:
                self.active -= 1

    def close(self):
        self.closed = True


@pytest.fixture
def api_key_patterns() -> PatternSet:
    return PatternSet.compile([(API_KEY_RULE, "High")])


@pytest.fixture
def stub_fetcher_factory():
    return StubFetcher


@pytest.fixture
def console() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def plain_reporter(console) -> Reporter:
    return Reporter(stream=console, use_color=False)


def fetch_failure(target: str) -> FetchError:
    return FetchError(target, ConnectionError("connection refused"))
