"""CircleCI artifact client for fetching a previous run's test output."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import httpx

from testsplit.config import CircleCIConfig

logger = logging.getLogger(__name__)

LogSink = Callable[[str], None]


class ArtifactFetchError(Exception):
    """Raised internally when an artifact request fails."""

    pass


def artifacts_url(template: str, options: dict[str, str]) -> str:
    """Substitute ``%key%`` placeholders in a URL template.

    Keys without a placeholder are ignored; placeholders without a key are
    left untouched.
    """
    url = template
    for key, value in options.items():
        url = url.replace(f"%{key}%", str(value))
    return url


class CircleCIArtifactProvider:
    """Fetches and concatenates artifacts of the latest successful build."""

    def __init__(
        self,
        config: CircleCIConfig,
        log: Optional[LogSink] = None,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the provider.

        Args:
            config: CircleCI project, token and URL settings
            log: Sink for failure messages (defaults to a module logger warning)
            client: HTTP client to use instead of creating one per fetch
        """
        self.config = config
        self.log = log or logger.warning
        self._client = client

    def fetch_history(self) -> str:
        """Download matching artifacts and return their concatenated bodies.

        Never raises: every failure is reported through the log sink and an
        empty string (or the bodies that did arrive) is returned.
        """
        try:
            if self._client is not None:
                return self._fetch(self._client)
            with httpx.Client(timeout=self.config.timeout_seconds) as client:
                return self._fetch(client)
        except ArtifactFetchError as e:
            self.log(f"Fetch artifacts error: {e}")
            return ""
        except ValueError as e:
            self.log(f"Invalid artifact listing: {e}")
            return ""
        except Exception as e:
            self.log(f"Unexpected error fetching artifacts: {e}")
            return ""

    def _fetch(self, client: httpx.Client) -> str:
        urls = self._artifact_urls(client)
        if not urls:
            logger.info("No artifacts match %s", self.config.artifact_pattern)
            return ""

        workers = min(self.config.max_concurrency, len(urls))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            bodies = list(executor.map(lambda url: self._download(client, url), urls))

        fetched = [body for body in bodies if body is not None]
        logger.info("Fetched %d of %d artifacts", len(fetched), len(urls))
        return "".join(fetched)

    def _artifact_urls(self, client: httpx.Client) -> list[str]:
        """List artifact URLs that fully match the configured pattern."""
        url = artifacts_url(self.config.artifacts_url_template, self.config.url_options())
        data = self._get(client, url, headers={"Accept": "application/json"}).json()
        if not isinstance(data, list):
            raise ArtifactFetchError(f"Unexpected artifact listing: {type(data).__name__}")

        pattern = re.compile(self.config.artifact_pattern)
        urls = [
            artifact.get("url", "")
            for artifact in data
            if isinstance(artifact, dict)
        ]
        return [u for u in urls if u and pattern.fullmatch(u)]

    def _download(self, client: httpx.Client, url: str) -> Optional[str]:
        """Download one artifact, or None if it failed."""
        try:
            response = self._get(
                client,
                url,
                params={"circle-token": self.config.access_token or ""},
            )
            return response.text
        except ArtifactFetchError as e:
            self.log(f"Fetch artifact error: {e}")
            return None

    def _get(self, client: httpx.Client, url: str, **kwargs) -> httpx.Response:
        try:
            response = client.get(url, **kwargs)
        except httpx.TimeoutException:
            raise ArtifactFetchError(f"Request timed out: {_redact(url)}")
        except httpx.HTTPError as e:
            raise ArtifactFetchError(f"{type(e).__name__}: {_redact(str(e))}")

        if response.status_code != 200:
            raise ArtifactFetchError(f"({response.status_code}) {_redact(url)}")
        return response


def _redact(url: str) -> str:
    """Hide the API token in URLs that end up in logs."""
    return re.sub(r"(circle-token=)[^&]*", r"\1***", url)
