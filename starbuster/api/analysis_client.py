"""
Client for the external stargazer analysis service.

The service fetches stargazers and their profiles from GitHub, computes the
pattern counts and the suspicion score, and returns them as JSON. This module
only submits repositories and turns failures into categorized errors.
"""

import logging
import re
import time
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

import requests

from starbuster.core.constants import (
    ANALYZE_ENDPOINT,
    DEFAULT_API_URL,
    DEFAULT_MAX_STARS,
    DEFAULT_MAX_USERS,
    GITHUB_URL_PATTERN,
    MAX_RETRIES,
    REQUEST_TIMEOUT,
)
from starbuster.core.errors import AnalysisServiceError, ErrorKind, classify_error

logger = logging.getLogger(__name__)

_GITHUB_URL_RE = re.compile(GITHUB_URL_PATTERN)


def validate_github_url(url: str) -> bool:
    """Check for a plain https://github.com/<owner>/<repo> URL."""
    return bool(url) and bool(_GITHUB_URL_RE.match(url))


def parse_repo_reference(reference: str) -> Tuple[str, str]:
    """
    Split 'owner/repo' or a GitHub URL into (owner, repo).

    Raises:
        ValueError: If the reference is not a GitHub repository
    """
    reference = (reference or "").strip()
    if reference.startswith(("http://", "https://")):
        parsed_url = urlparse(reference)
        path_parts = parsed_url.path.strip("/").split("/")
        if len(path_parts) >= 2 and parsed_url.netloc.lower() == "github.com":
            owner_str, repo_str = path_parts[0], path_parts[1]
            if repo_str.endswith(".git"):
                repo_str = repo_str[:-4]
            return owner_str, repo_str
        raise ValueError("Invalid GitHub URL structure.")

    parts = reference.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError("Invalid repository format. Use 'owner/repo' or a full GitHub URL.")
    return parts[0], parts[1]


def to_repo_url(reference: str) -> str:
    owner_str, repo_str = parse_repo_reference(reference)
    return f"https://github.com/{owner_str}/{repo_str}"


class AnalysisClient:
    """
    HTTP client for the analysis service.

    Attributes:
        base_url: Service base URL, without trailing slash
        session: Persistent session for making HTTP requests
        timeout: Per-request timeout in seconds
        max_retries: Attempts for server and network errors
        backoff: Seconds multiplied by the attempt number between retries
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        backoff: float = 2.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff

        logger.debug(f"Analysis client initialized for {self.base_url}")

    @staticmethod
    def _error_text(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text

    def _wait_before_retry(self, retry_count: int) -> None:
        if retry_count >= self.max_retries:
            return
        wait_time = self.backoff * (retry_count + 1)
        logger.debug(f"Retrying in {wait_time}s...")
        time.sleep(wait_time)

    def request(self, endpoint: str, method: str = "POST", data: Optional[Dict] = None) -> Dict:
        """
        Make a request to the service with retries.

        Server errors (5xx) and network errors are retried; other failures are
        returned immediately.

        Args:
            endpoint: Path appended to the base URL
            method: HTTP method
            data: JSON request body

        Returns:
            Dict: Parsed JSON response, or ``{"error": ..., "status_code": ...}``
        """
        url = f"{self.base_url}{endpoint}"
        retry_count = 0
        last_error = {"error": f"Failed after {self.max_retries} retries", "status_code": 0}

        while retry_count < self.max_retries:
            try:
                response = self.session.request(method, url, json=data, timeout=self.timeout)

                if response.status_code == 200:
                    try:
                        return response.json()
                    except ValueError:
                        logger.error(f"Analysis service returned malformed JSON from {url}")
                        return {
                            "error": "Malformed JSON in service response",
                            "status_code": 0,
                            "kind": ErrorKind.UNKNOWN,
                        }

                error_text = self._error_text(response)
                if response.status_code >= 500:
                    retry_count += 1
                    last_error = {"error": error_text, "status_code": response.status_code}
                    logger.warning(
                        f"Server error ({response.status_code}) from {url} "
                        f"(attempt {retry_count}/{self.max_retries})"
                    )
                    self._wait_before_retry(retry_count)
                    continue

                logger.error(f"Analysis service error: {response.status_code} - {error_text}")
                return {"error": error_text, "status_code": response.status_code}

            except requests.exceptions.RequestException as e:
                retry_count += 1
                last_error = {
                    "error": f"Network error: {e}",
                    "status_code": 0,
                    "kind": ErrorKind.NETWORK_ERROR,
                }
                logger.warning(
                    f"Network error for {url} (attempt {retry_count}/{self.max_retries}): {str(e)}"
                )
                self._wait_before_retry(retry_count)
                continue

        logger.error(f"Failed to make request to {url} after {self.max_retries} attempts")
        return last_error

    def analyze(
        self,
        repo_url: str,
        deep_analysis: bool = False,
        max_stars: int = DEFAULT_MAX_STARS,
        max_users: int = DEFAULT_MAX_USERS,
    ) -> Dict:
        """
        Submit a repository for analysis.

        Args:
            repo_url: https://github.com/<owner>/<repo>
            deep_analysis: Request the advanced (per-profile) analysis
            max_stars: Maximum stargazers the service should sample
            max_users: Maximum user profiles the service should inspect

        Returns:
            Dict: Service payload with ``repository``, ``analysis`` and ``metadata``

        Raises:
            AnalysisServiceError: For invalid input or any service failure
        """
        if not validate_github_url(repo_url):
            raise AnalysisServiceError(
                ErrorKind.INVALID_INPUT, f"Invalid GitHub repository URL: {repo_url}"
            )

        logger.info(
            f"Requesting {'advanced' if deep_analysis else 'basic'} analysis of {repo_url}"
        )
        result = self.request(
            ANALYZE_ENDPOINT,
            data={
                "repoUrl": repo_url,
                "deepAnalysis": deep_analysis,
                "maxStars": max_stars,
                "maxUsers": max_users,
            },
        )

        if not isinstance(result, dict):
            raise AnalysisServiceError(
                ErrorKind.UNKNOWN, f"Unexpected response type: {type(result).__name__}"
            )
        if "error" in result:
            message = str(result.get("error") or "Failed to analyze repository")
            status_code = result.get("status_code")
            # Transport failures carry their kind; only HTTP errors are classified
            kind = result.get("kind") or classify_error(status_code, message)
            raise AnalysisServiceError(kind, message, status_code or None)
        return result
