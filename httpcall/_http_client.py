import platform
import threading
from typing import Dict, List, Mapping, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict
from urllib3.util.retry import Retry

from httpcall import __version__
from httpcall._body import EncodedBody
from httpcall._config import HTTPCallConfig
from httpcall._constants import (
    HEADER_ACCEPT,
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_USER_AGENT,
    MIME_APPLICATION_JSON,
)
from httpcall._context import CallContext
from httpcall._logging import LoggerConfig

HeaderValues = Union[str, List[str]]


class HTTPRequest:
    """
    Represents a fully-formed outgoing HTTP request.

    Headers are multi-valued: each name maps to the list of its values, and names are
    case-insensitive. Values of a repeated header are combined into one comma-separated
    field when the request is handed to the transport.

    Attributes:
    ----------
    method: str
        The HTTP method (e.g., "GET", "POST", "PUT", etc.).
    url: str
        The full URL to send the request to, query string included.
    headers: CaseInsensitiveDict[List[str]]
        The header values to be included in the request.
    body: bytes, optional
        The encoded payload of the request, None when there is no body.
    context: CallContext
        The cancellation/deadline context the request is bound to.
    """

    def __init__(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, HeaderValues]] = None,
        body: Optional[bytes] = None,
        context: Optional[CallContext] = None,
    ):
        self.method = method
        self.url = url
        self.headers: CaseInsensitiveDict[List[str]] = CaseInsensitiveDict()
        for name, values in (headers or {}).items():
            self.headers[name] = [values] if isinstance(values, str) else list(values)
        self.body = body
        self.context = context or CallContext.background()

    def add_header(self, name: str, value: str) -> None:
        """Append a value to a header, keeping the values already present."""
        if name in self.headers:
            self.headers[name].append(value)
        else:
            self.headers[name] = [value]

    def set_header(self, name: str, value: str) -> None:
        """Replace every value of a header with a single value."""
        self.headers[name] = [value]

    def get_header(self, name: str) -> Optional[str]:
        """Return the first value of a header, or None if it is not set."""
        values = self.headers.get(name)
        return values[0] if values else None

    def header_values(self, name: str) -> List[str]:
        return list(self.headers.get(name, []))

    def flat_headers(self) -> Dict[str, str]:
        return {name: ", ".join(values) for name, values in self.headers.items()}

    def apply_body(self, encoded: EncodedBody) -> None:
        """Set the payload, Content-Length and the header changes produced by the body encoder."""
        for name, value in encoded.set_headers.items():
            self.set_header(name, value)
        for name, value in encoded.add_headers:
            self.add_header(name, value)
        self.body = encoded.payload
        self.set_header(HEADER_CONTENT_LENGTH, str(encoded.content_length))


def new_http_request(method: str, url: str, context: Optional[CallContext] = None) -> HTTPRequest:
    """
    Create a request carrying the default ``Accept`` and ``Content-Type`` headers, both application/json.
    """
    request = HTTPRequest(method=method, url=url, context=context)
    request.add_header(HEADER_ACCEPT, MIME_APPLICATION_JSON)
    request.set_header(HEADER_CONTENT_TYPE, MIME_APPLICATION_JSON)
    return request


class HTTPClient:
    """
    Responsible for sending requests over the network using the `requests` library.

    This class is the transport used by HTTPClientCall. It owns a `requests.Session`, created
    lazily and shared by every call that uses this client, with the retry policy from the
    configuration mounted on it. The client may be shared across threads; the session is
    created once under a lock.

    Attributes:
    ----------
    config: HTTPCallConfig
        The transport configuration.
    timeout: float
        Default request timeout in seconds.
    max_retries: int
        Number of retries performed by the session adapters.
    retry_backoff_factor: float
        Backoff factor between retries.
    headers: dict
        Identification headers added to every request sent by this client.

    Methods:
    -------
    send(request: HTTPRequest, stream: bool = False) -> requests.Response:
        Sends the HTTP request and returns the HTTP response.
    """

    def __init__(self, config: Optional[HTTPCallConfig] = None, session: Optional[requests.Session] = None):
        """
        Initializes a new instance of HTTPClient.

        Parameters:
        ----------
        config: HTTPCallConfig, optional
            The transport configuration. Resolved from the environment when omitted.
        session: requests.Session, optional
            A preconfigured session to use instead of creating one.
        """
        self.config = config or HTTPCallConfig()
        self.timeout = self.config.timeout
        self.max_retries = self.config.max_retries
        self.retry_backoff_factor = self.config.retry_backoff_factor
        self.logger = LoggerConfig(logger_name=__name__, log_level=self.config.log_level).get_logger()
        self.headers = self._generate_headers()
        self._session = session
        self._session_lock = threading.Lock()

    def _generate_headers(self) -> Dict[str, str]:
        """
        Generates the identification headers sent with every request.

        Returns:
            Dict[str, str]: A dictionary with a "User-Agent" header naming the client version,
            the Python version and the platform. Unknown values fall back to placeholders.
        """
        try:
            python_version = platform.python_version()
            system_platform = platform.platform()
        except Exception:
            python_version = "(unknown)"
            system_platform = "(unknown)"

        return {HEADER_USER_AGENT: f"httpcall/{__version__} (Python/{python_version}; {system_platform})"}

    def _get_session(self) -> requests.Session:
        """
        Returns the shared session, creating it on first use.

        When max_retries is greater than zero, the session retries idempotent requests on
        connection errors and on the configured status codes, returning the last response
        once retries are exhausted.
        """
        with self._session_lock:
            if self._session is None:
                session = requests.Session()
                if self.max_retries > 0:
                    retry_strategy = Retry(
                        total=self.max_retries,
                        status_forcelist=self.config.retry_status_forcelist,
                        backoff_factor=self.retry_backoff_factor,
                        raise_on_status=False,
                    )
                    adapter = HTTPAdapter(max_retries=retry_strategy)
                else:
                    adapter = HTTPAdapter()
                session.mount("https://", adapter)
                session.mount("http://", adapter)
                session.headers.update(self.headers)
                self._session = session
            return self._session

    def _resolve_timeout(self, context: CallContext) -> float:
        remaining = context.remaining()
        if remaining is None:
            return self.timeout
        return min(remaining, self.timeout)

    def send(self, request: HTTPRequest, stream: bool = False) -> requests.Response:
        """
        Sends an HTTP request and returns the HTTP response.

        Parameters:
        ----------
        request: HTTPRequest
            The HTTPRequest object containing method, URL, headers, body and context.
        stream: bool
            If True, the response body is not read; the caller must read or close it.

        Returns:
        -------
        requests.Response:
            The response returned by the server, whatever its status code.

        Raises:
        -------
        CallCancelledError, DeadlineExceededError:
            If the request context fired before the request was sent.
        requests.RequestException:
            For any transport-level failure.
        """
        request.context.check()
        session = self._get_session()
        prepared = session.prepare_request(
            requests.Request(
                method=request.method,
                url=request.url,
                headers=request.flat_headers(),
                data=request.body,
            )
        )
        settings = session.merge_environment_settings(prepared.url, {}, stream, self.config.verify_ssl, None)

        self.logger.debug(f"Sending {request.method} {request.url}")
        response = session.send(prepared, timeout=self._resolve_timeout(request.context), **settings)
        self.logger.debug(f"Received {response.status_code} for {request.method} {request.url}")
        return response

    def close(self) -> None:
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
