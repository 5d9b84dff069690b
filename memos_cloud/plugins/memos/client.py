"""HTTP client for the MemOS Cloud API.

Every call is a JSON POST with Token authorization. Failed attempts
(network error, timeout, non-2xx status, undecodable body) are retried
``retries`` times with a linear backoff of 100ms x (attempt + 1). Each
attempt, body download included, is cut off after timeout_ms.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Any, Callable, Dict, Optional

import requests

from .config_loader import MemosSettings
from .errors import AuthenticationMissingError, TransportError

logger = logging.getLogger(__name__)

SEARCH_MEMORY_PATH = "/search/memory"
ADD_MESSAGE_PATH = "/add/message"

# Backoff step between attempts, in seconds.
BACKOFF_STEP = 0.1

# Bytes read per chunk while streaming a response body.
READ_CHUNK_SIZE = 8192

# Worker threads running HTTP attempts, shared by every client instance.
_request_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="memos-http")


class MemosClient:
    """Executes requests against the MemOS Cloud endpoints.

    The client is stateless apart from its settings; a single instance can
    serve every hook invocation of a plugin registration.
    """

    def __init__(
        self,
        settings: MemosSettings,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the client.

        Args:
            settings: Resolved plugin settings (endpoint, key, timeout, retries).
            sleep: Function used to wait between attempts (injectable for tests).
            clock: Seconds clock used for the per-attempt deadline.
        """
        self._settings = settings
        self._sleep = sleep
        self._clock = clock

    @property
    def settings(self) -> MemosSettings:
        return self._settings

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Token {self._settings.api_key}",
        }

    def _read_body(
        self, response: requests.Response, deadline: Optional[float], path: str
    ) -> bytes:
        """Read the streamed body, failing once the attempt deadline passes."""
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                if self._expired(deadline):
                    raise self._timeout_error(path)
                chunks.append(chunk)
        except requests.Timeout as e:
            raise self._timeout_error(path) from e
        except requests.RequestException as e:
            raise TransportError(f"Reading response from {path} failed: {e}", path=path) from e
        return b"".join(chunks)

    def _expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self._clock() > deadline

    def _timeout_error(self, path: str) -> TransportError:
        return TransportError(
            f"Request to {path} timed out after {self._settings.timeout_ms}ms",
            path=path,
        )

    def _attempt(self, url: str, body: Dict[str, Any], path: str) -> Any:
        """Run a single POST, raising TransportError on any failure.

        timeout_ms bounds the whole attempt, body download included. The
        request runs on a worker thread so the caller is released at the
        deadline even while a socket read is still blocked.
        """
        # A timeout_ms of 0 disables the deadline.
        timeout = self._settings.timeout_ms / 1000.0 or None
        deadline = self._clock() + timeout if timeout else None
        future = _request_pool.submit(self._request, url, body, path, timeout, deadline)
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            future.cancel()
            raise self._timeout_error(path) from None

    def _request(
        self,
        url: str,
        body: Dict[str, Any],
        path: str,
        timeout: Optional[float],
        deadline: Optional[float],
    ) -> Any:
        try:
            response = requests.post(
                url,
                json=body,
                headers=self._headers(),
                timeout=timeout,
                stream=True,
            )
        except requests.Timeout as e:
            raise self._timeout_error(path) from e
        except requests.RequestException as e:
            raise TransportError(f"Request to {path} failed: {e}", path=path) from e

        try:
            if not 200 <= response.status_code < 300:
                raise TransportError(
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                    path=path,
                )
            if self._expired(deadline):
                raise self._timeout_error(path)
            raw = self._read_body(response, deadline, path)
        finally:
            response.close()

        try:
            return json.loads(raw)
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON in response from {path}",
                status_code=response.status_code,
                path=path,
            ) from e

    def call_api(self, path: str, body: Dict[str, Any]) -> Any:
        """POST a JSON body to an endpoint path, retrying on failure.

        Args:
            path: Endpoint path relative to the base URL (e.g. "/search/memory").
            body: JSON-serializable request body.

        Returns:
            The parsed JSON response of the first successful attempt.

        Raises:
            AuthenticationMissingError: If no API key is configured. No request
                is made in that case.
            TransportError: The failure of the last attempt once retries are
                exhausted.
        """
        if not self._settings.api_key:
            raise AuthenticationMissingError()

        url = f"{self._settings.base_url}{path}"
        retries = max(0, self._settings.retries)
        last_error: Optional[TransportError] = None

        for attempt in range(retries + 1):
            try:
                return self._attempt(url, body, path)
            except TransportError as e:
                e.attempts = attempt + 1
                last_error = e
                logger.debug("MemOS %s attempt %d failed: %s", path, attempt + 1, e)
                if attempt < retries:
                    self._sleep(BACKOFF_STEP * (attempt + 1))

        raise last_error

    def search_memory(self, payload: Dict[str, Any]) -> Any:
        """Search stored memories (POST /search/memory)."""
        return self.call_api(SEARCH_MEMORY_PATH, payload)

    def add_message(self, payload: Dict[str, Any]) -> Any:
        """Submit conversation messages for storage (POST /add/message)."""
        return self.call_api(ADD_MESSAGE_PATH, payload)
