#!/usr/bin/env python3
"""Single-shot HTTP retrieval of target bodies."""

import time
import socket
import logging
import threading
from typing import Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from requests.exceptions import HTTPError, RequestException, Timeout

from .errors import FetchError, ReadError


DEFAULT_TIMEOUT = 10
DEFAULT_USER_AGENT = 'leakscan/1.0'


class Fetcher:
    """
    Performs one GET per target with a hard timeout and no retries.

    The timeout bounds the whole request. requests only applies it to the
    connect step and to each socket read, so a watchdog shuts the connection
    down once the deadline passes while the body is still arriving.

    Redirects are followed the way requests follows them by default. Non-2xx
    statuses, connection failures and timeouts raise FetchError; a failure
    while reading the body after the headers arrived raises ReadError.
    """

    def __init__(self,
                 timeout: float = DEFAULT_TIMEOUT,
                 user_agent: str = None,
                 verify_ssl: bool = True,
                 pool_size: int = 10):
        """
        Args:
            timeout: Default per-request timeout in seconds
            user_agent: User-Agent header sent with every request
            verify_ssl: Whether to verify TLS certificates
            pool_size: Connections kept per host, normally the scan concurrency
        """
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.verify_ssl = verify_ssl
        self.logger = logging.getLogger(__name__)

        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        self.session = requests.Session()
        self.session.headers.update({'User-Agent': self.user_agent})
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)

    def fetch(self, target: str, timeout: Optional[float] = None) -> str:
        """
        Fetch a target and return its decoded body.

        Args:
            target: URL to request
            timeout: Override of the default timeout in seconds

        Returns:
            The response body as text

        Raises:
            FetchError: on connection errors, timeouts, bad URLs or non-2xx status
            ReadError: when the body cannot be read after a successful connection
        """
        timeout = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        self.logger.debug(f"Requesting URL: {target}")

        try:
            response = self.session.get(target, timeout=timeout, verify=self.verify_ssl, stream=True)
        except RequestException as e:
            raise FetchError(target, e) from e

        try:
            try:
                self._check_status(response)
            except HTTPError as e:
                raise FetchError(target, e) from e

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FetchError(target, Timeout(f"No response within {timeout} seconds"))

            content = self._read_body(target, response, remaining, timeout)
            return self._decode(response, content)
        finally:
            response.close()

    def _read_body(self, target: str, response: requests.Response, remaining: float, timeout: float) -> bytes:
        expired = threading.Event()

        def abort():
            expired.set()
            _shutdown_connection(response)

        watchdog = threading.Timer(remaining, abort)
        watchdog.daemon = True
        watchdog.start()
        try:
            content = response.content
        except RequestException as e:
            if expired.is_set():
                raise ReadError(target, Timeout(f"Body not received within {timeout} seconds")) from e
            raise ReadError(target, e) from e
        finally:
            watchdog.cancel()

        # Without a Content-Length a shut down connection just ends the body early
        if expired.is_set():
            raise ReadError(target, Timeout(f"Body not received within {timeout} seconds"))
        return content

    @staticmethod
    def _check_status(response: requests.Response) -> None:
        response.raise_for_status()
        # raise_for_status only covers 4xx and 5xx
        if not 200 <= response.status_code < 300:
            raise HTTPError(f"{response.status_code} Unexpected Status for url: {response.url}",
                            response=response)

    @staticmethod
    def _decode(response: requests.Response, content: bytes) -> str:
        encoding = response.encoding or 'utf-8'
        try:
            return content.decode(encoding, errors='replace')
        except LookupError:
            # Unknown charset label in Content-Type
            return content.decode('utf-8', errors='replace')

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def _shutdown_connection(response: requests.Response) -> None:
    """Wake a read blocked on the response's socket."""
    raw = response.raw
    connection = getattr(raw, 'connection', None) or getattr(raw, '_connection', None)
    sock = getattr(connection, 'sock', None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already closed by the reader
        pass
