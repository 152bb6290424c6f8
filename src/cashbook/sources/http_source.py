"""
Import from a remote CSV over HTTP(S).

The body is streamed: records are parsed as bytes arrive, the file is never
buffered in full. Release closes the response and the session.
"""

import logging
from typing import BinaryIO, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import SourceError
from .base import ImportSource

logger = logging.getLogger(__name__)


class HttpImportSource(ImportSource):
    """
    Remote CSV source.

    Features:
    - Streaming download (``stream=True``)
    - Automatic retry with backoff for transient failures
    - Optional bearer token
    """

    DEFAULT_TIMEOUT = 30

    # A dropped connection mid-body surfaces as urllib3 ProtocolError/ReadTimeoutError
    read_errors = (OSError, urllib3.exceptions.HTTPError)

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ):
        """
        Initialize HTTP source.

        Args:
            url: Location of the CSV file
            token: Optional bearer token for authentication
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts for transient failures
            backoff_factor: Backoff factor for retries
        """
        super().__init__()
        self.url = url
        self.timeout = timeout
        self._response: Optional[requests.Response] = None

        self.session = requests.Session()
        self.session.headers.update({"Accept": "text/csv, text/plain, */*"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @property
    def name(self) -> str:
        return self.url

    def _open(self) -> BinaryIO:
        try:
            response = self.session.get(self.url, timeout=self.timeout, stream=True)
        except requests.exceptions.ConnectionError as e:
            raise SourceError(f"Failed to connect to {self.url}: {e}") from e
        except requests.exceptions.Timeout as e:
            raise SourceError(f"Request to {self.url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise SourceError(f"Request failed: {e}") from e

        self._response = response
        if not response.ok:
            raise SourceError(
                f"Download of {self.url} failed: HTTP {response.status_code} {response.reason}"
            )

        # Undo any Content-Encoding so callers see plain CSV bytes
        response.raw.decode_content = True
        # urllib3 closes the body at end of data by default, which breaks io wrappers
        response.raw.auto_close = False
        return response.raw

    def _release(self) -> None:
        if self._response is not None:
            self._response.close()
            self._response = None
        self.session.close()
