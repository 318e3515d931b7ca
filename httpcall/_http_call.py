from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests

from httpcall._body import encode_body
from httpcall._constants import ALLOWED_METHODS, HEADER_CONTENT_TYPE
from httpcall._context import CallContext
from httpcall._decoder import decode_response
from httpcall._http_client import HTTPRequest, new_http_request
from httpcall._logging import LoggerConfig
from httpcall._models import HTTPClientCallResponse
from httpcall._query import encode_params
from httpcall.exceptions import (
    EmptyHostError,
    EmptyMethodError,
    HTTPCallError,
    HTTPCallUsageError,
    MethodNotAllowedError,
    ResponseDecodeError,
)

logger = LoggerConfig(logger_name=__name__).get_logger()

Values = Union[str, Iterable[str]]


def _to_multi_dict(values: Optional[Mapping[str, Values]]) -> Optional[Dict[str, List[str]]]:
    if values is None:
        return None
    return {key: [value] if isinstance(value, str) else list(value) for key, value in values.items()}


class HTTPClientCall:
    """
    Fluent builder and executor for a single HTTP call.

    Every setter stores one piece of the call configuration and returns the same instance, so a
    call reads as one chain::

        response = (
            HTTPClientCall("https://api.example.com", client)
            .method("POST")
            .path("/users")
            .params({"dry_run": ["true"]})
            .body({"name": "Pablo"})
            .do_with_unmarshal(user)
        )

    Query parameters and body are consumed by an execution: they are cleared once ``do`` or
    ``do_with_unmarshal`` returns or raises, while host, path, method, headers and flags are
    kept for a later call. An instance must not be used by several threads at once; the
    transport, on the other hand, can be shared between instances.

    Attributes:
    ----------
    _client: HTTPClient
        The transport. Any object with a ``send(request, stream=...)`` method returning a
        `requests.Response` is accepted.
    """

    def __init__(self, host: str, client: Any):
        """
        Initializes a new call bound to a host and a transport.

        Parameters:
        ----------
        host: str
            Scheme and authority the path is appended to, e.g. "https://api.example.com".
        client: HTTPClient
            The transport used to send the request.

        Raises:
        -------
        HTTPCallUsageError:
            If client is None or host is empty.
        """
        if client is None:
            raise HTTPCallUsageError("You must create client")
        if not host:
            raise HTTPCallUsageError("empty host")
        self._client = client
        self._host = host
        self._path = ""
        self._params: Optional[Dict[str, List[str]]] = None
        self._encode_url = True
        self._method = ""
        self._headers: Optional[Dict[str, List[str]]] = None
        self._body: Any = None
        self._gzip_compress = False
        self._content_type = ""

    def host(self, host: str) -> "HTTPClientCall":
        self._host = host
        return self

    def path(self, path: str) -> "HTTPClientCall":
        self._path = path
        return self

    def params(self, params: Optional[Mapping[str, Values]]) -> "HTTPClientCall":
        """Set the query parameters, each name mapped to a value or a list of values."""
        self._params = _to_multi_dict(params)
        return self

    def encode_url(self, encode_url: bool) -> "HTTPClientCall":
        """Choose between percent-encoded (True, default) and raw (False) query parameters."""
        self._encode_url = encode_url
        return self

    def method(self, method: str) -> "HTTPClientCall":
        self._method = method
        return self

    def headers(self, headers: Optional[Mapping[str, Values]]) -> "HTTPClientCall":
        """Set extra headers. Their values are appended to the default ones, never replacing them."""
        self._headers = _to_multi_dict(headers)
        return self

    def body(self, body: Any) -> "HTTPClientCall":
        """
        Set the request body.

        A str is sent as-is; any other value is serialized to JSON. Wrap the value in RawText or
        Structured to choose explicitly.
        """
        self._body = body
        return self

    def use_gzip_compress(self, gzip_compress: bool) -> "HTTPClientCall":
        self._gzip_compress = gzip_compress
        return self

    def content_type(self, content_type: str) -> "HTTPClientCall":
        """Override the default Content-Type. Structured bodies still force application/json."""
        self._content_type = content_type
        return self

    def validate_http_method(self) -> None:
        """
        Check the configured method against the allowed methods.

        Raises:
        -------
        EmptyMethodError:
            If no method is set.
        MethodNotAllowedError:
            If the method is not one of GET, POST, PUT, DELETE or PATCH.
        """
        if not self._method:
            raise EmptyMethodError()
        if self._method not in ALLOWED_METHODS:
            raise MethodNotAllowedError()

    def construct_url_path(self) -> str:
        """Return the path followed by the encoded query string, if any parameter is set."""
        if not self._params:
            return self._path
        return f"{self._path}?{encode_params(self._params, escape=self._encode_url)}"

    def construct_url(self) -> str:
        return f"{self._host}{self.construct_url_path()}"

    def _build_request(self, context: Optional[CallContext]) -> HTTPRequest:
        request = new_http_request(self._method, self.construct_url(), context)
        if self._content_type:
            request.set_header(HEADER_CONTENT_TYPE, self._content_type)
        request.apply_body(encode_body(self._body, self._gzip_compress))
        for name, values in (self._headers or {}).items():
            for value in values:
                request.add_header(name, value)
        return request

    def do(self, context: Optional[CallContext] = None) -> requests.Response:
        """
        Execute the call and return the raw response.

        The response body is streamed and left unread: the caller owns the response and must
        read or close it.

        Parameters:
        ----------
        context: CallContext, optional
            Cancellation/deadline context for the request. Defaults to a background context.

        Returns:
        -------
        requests.Response:
            The response, whatever its status code.

        Raises:
        -------
        RequestValidationError:
            If the host is empty or the method is empty or not allowed.
        BodyEncodingError:
            If the body cannot be encoded or compressed.
        CallCancelledError, DeadlineExceededError:
            If the context fired before the request was sent.
        requests.RequestException:
            For any transport-level failure, unchanged.
        """
        try:
            if not self._host:
                raise EmptyHostError()
            self.validate_http_method()
            request = self._build_request(context)
            return self._client.send(request, stream=True)
        except HTTPCallError as e:
            logger.debug(f"Call to {self._host}{self._path} not sent: {e}")
            raise
        finally:
            self._params = None
            self._body = None

    def do_with_unmarshal(self, target: Any, context: Optional[CallContext] = None) -> HTTPClientCallResponse:
        """
        Execute the call, decode the response body into ``target`` and close the response.

        The decoder is chosen from the response Content-Type: application/json bodies are decoded
        as JSON, text/plain and text/html bodies are written to a text buffer. Other content types
        leave the target untouched.

        Parameters:
        ----------
        target: Any
            Where to decode the body: a dict, list, dataclass or plain object for JSON, an
            io.StringIO (or any io.TextIOBase) for text.
        context: CallContext, optional
            Cancellation/deadline context for the request.

        Returns:
        -------
        HTTPClientCallResponse:
            The response status code.

        Raises:
        -------
        ResponseDecodeError:
            If the body cannot be decoded into the target. ``status_code`` and ``body`` are set
            from the response. UnsupportedTargetTypeError is raised for targets the selected
            decoder cannot write to.

        Every error raised by ``do`` is propagated unchanged.
        """
        response = self.do(context)
        try:
            data = response.content
            status_code = response.status_code
            content_type = response.headers.get(HEADER_CONTENT_TYPE, "")
        finally:
            response.close()

        try:
            decode_response(content_type, data, target)
        except ResponseDecodeError as e:
            if e.status_code is None:
                e.status_code = status_code
            if e.body is None:
                e.body = data.decode("utf-8", errors="replace")
            raise

        return HTTPClientCallResponse(status_code=status_code)
