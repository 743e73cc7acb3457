"""
HTTP client used by the network transports.

Wraps a requests.Session. Retries are left to the transports so that one flush
never hides a second retry loop inside the adapter.
"""

import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class HttpClient:
    """Minimal HTTP client with a shared session and default timeout."""

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize HTTP client with configuration.

        Args:
            base_url: Base URL for all requests
            session: Optional existing session to use
            timeout: Request timeout in seconds
            headers: Headers sent with every request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.session = session or self._create_session()
        if headers:
            self.session.headers.update(headers)

    def _create_session(self) -> requests.Session:
        """Create a session with adapter retries disabled."""
        session = requests.Session()
        adapter = HTTPAdapter(max_retries=Retry(total=0, connect=0, read=0, redirect=0, status=0))
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def post(
        self,
        endpoint: str,
        data: Union[str, bytes, None] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> requests.Response:
        """Perform POST request.

        Args:
            endpoint: API endpoint (relative to base_url)
            data: Raw request body
            json: JSON body
            params: Query parameters
            headers: Additional headers
            **kwargs: Additional arguments passed to requests

        Returns:
            Response object
        """
        url = self._build_url(endpoint)

        self.logger.debug(f"POST {url}")

        response = self.session.post(
            url,
            data=data,
            json=json,
            params=params,
            headers=headers,
            timeout=kwargs.pop("timeout", self.timeout),
            **kwargs,
        )

        self._log_response(response)
        return response

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint."""
        if endpoint.startswith("http"):
            return endpoint
        return urljoin(self.base_url + "/", endpoint.lstrip("/"))

    def _log_response(self, response: requests.Response) -> None:
        self.logger.debug(f"Response: {response.status_code} - {len(response.content)} bytes")

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()
