"""HTTP GET JSON retrieval from the upstream SpaceX API."""

import json
import socket
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

import structlog

from ..config.defaults import UpstreamParams
from ..errors import UpstreamError

logger = structlog.get_logger(__name__)


class UpstreamFetcher:
    """
    Plain JSON fetcher for the upstream data API.

    Each call is independent: no retries and no caching. Every request
    carries the configured timeout.
    """

    def __init__(self, config: Optional[UpstreamParams] = None):
        self.config = config or UpstreamParams()
        self.logger = logger.bind(base_url=self.config.base_url)

        parsed = urlparse(self.config.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid upstream base URL: {self.config.base_url}")

    def url_for(self, path: str) -> str:
        """Resolve a path against the base URL; absolute URLs pass through."""
        if urlparse(path).scheme in ("http", "https"):
            return path
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def fetch_json(self, path: str) -> Any:
        """
        GET a resource and decode its JSON body.

        Args:
            path: Path relative to the base URL, or an absolute URL

        Returns:
            Parsed JSON body

        Raises:
            UpstreamError: On non-2xx status, network failure or bad JSON
        """
        url = self.url_for(path)
        headers = {
            'Accept': 'application/json',
            'User-Agent': self.config.user_agent,
        }
        req = Request(url, headers=headers, method='GET')

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                status = response.getcode()
                body = response.read()

        except HTTPError as e:
            self.logger.warning(
                "Upstream returned error status",
                url=url,
                status=e.code,
                reason=str(e.reason)
            )
            raise UpstreamError(f"API error: {e.code}", status=e.code, url=url) from e

        except (OSError, URLError, socket.timeout) as e:
            self.logger.warning("Upstream network error", url=url, error=str(e))
            raise UpstreamError(f"Network error: {e}", status=None, url=url) from e

        if not 200 <= status < 300:
            self.logger.warning("Upstream returned non-success status", url=url, status=status)
            raise UpstreamError(f"API error: {status}", status=status, url=url)

        try:
            data = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.warning("Upstream returned undecodable body", url=url, error=str(e))
            raise UpstreamError(f"Invalid JSON from upstream: {e}", status=status, url=url) from e

        self.logger.debug("Upstream fetch complete", url=url, status=status)
        return data

    def fetch_all(self, paths: Sequence[str]) -> list[Any]:
        """
        Fetch several resources in parallel.

        Results come back in request order. The first failure aborts the
        batch: outstanding requests are cancelled and the error is raised.

        Args:
            paths: Resources to fetch

        Returns:
            Parsed JSON bodies, one per path
        """
        if not paths:
            return []

        workers = min(len(paths), self.config.max_parallel_fetches)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upstream") as pool:
            futures = [pool.submit(self.fetch_json, path) for path in paths]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)

            for future in futures:
                if future in done and future.exception() is not None:
                    for other in pending:
                        other.cancel()
                    raise future.exception()

            return [future.result() for future in futures]
