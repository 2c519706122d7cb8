"""
HTTP transport for remote contact import and export.

Provides a thin requests-based client with:
- JSON GET for fetching a contact array
- JSON POST for pushing the whole address book
- Mapping of transport failures and non-success responses to NetworkError

Each call is a single blocking request; there is no retry.
"""

import logging
from typing import Any, Optional

import requests
from requests.exceptions import RequestException

from rolodex import __version__
from rolodex.core.errors import NetworkError, ParseError

# HTTP timeout configuration
DEFAULT_TIMEOUT = 30.0  # seconds

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": f"rolodex/{__version__}",
}

logger = logging.getLogger(__name__)


class RemoteClient:
    """
    Transport collaborator used by Contacts.import_from_remote/export_to_remote.

    Attributes:
        timeout: Request timeout in seconds
        session: requests session shared by all calls

    Usage:
        client = RemoteClient(timeout=10)
        records = client.get("http://127.0.0.1:3000/contacts")
        status = client.post("http://127.0.0.1:3000/contacts", records)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, headers: Optional[dict[str, str]]) -> dict[str, str]:
        merged = dict(DEFAULT_HEADERS)
        if headers:
            merged.update(headers)
        return merged

    def get(self, url: str, headers: Optional[dict[str, str]] = None) -> Any:
        """
        Fetch and decode a JSON document.

        Args:
            url: Endpoint to fetch
            headers: Extra request headers

        Returns:
            Decoded JSON body

        Raises:
            NetworkError: On transport failure or a non-2xx response
            ParseError: If the body is not valid JSON
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(
                url, headers=self._headers(headers), timeout=self.timeout
            )
        except RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        self._check_status(response, url)

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON response from {url}: {e}") from e

    def post(
        self, url: str, body: Any, headers: Optional[dict[str, str]] = None
    ) -> int:
        """
        Send a JSON body.

        Args:
            url: Endpoint to post to
            body: JSON-serializable payload
            headers: Extra request headers

        Returns:
            HTTP status code

        Raises:
            NetworkError: On transport failure or a non-2xx response
        """
        logger.debug(f"POST {url}")
        try:
            response = self.session.post(
                url, json=body, headers=self._headers(headers), timeout=self.timeout
            )
        except RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        self._check_status(response, url)
        return response.status_code

    @staticmethod
    def _check_status(response: requests.Response, url: str) -> None:
        if not response.ok:
            raise NetworkError(
                f"{url} answered HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )

    def __repr__(self) -> str:
        return f"RemoteClient(timeout={self.timeout})"
