class HTTPCallUsageError(Exception):
    """
    Exception raised when an HTTPClientCall is constructed with invalid arguments.

    This is a programming error (missing transport, empty host) and is intentionally not
    a subclass of HTTPCallError, so handlers for recoverable call failures never catch it.
    """

    pass


class HTTPCallError(Exception):
    """Base class for all recoverable errors raised while executing a call."""

    pass


class RequestValidationError(HTTPCallError):
    """Exception raised when the call configuration is not valid for execution."""

    pass


class EmptyHostError(RequestValidationError):
    def __init__(self, message="empty host"):
        super().__init__(message)


class EmptyMethodError(RequestValidationError):
    def __init__(self, message="empty method"):
        super().__init__(message)


class MethodNotAllowedError(RequestValidationError):
    def __init__(self, message="method not allowed"):
        super().__init__(message)


class BodyEncodingError(HTTPCallError):
    """Exception raised when the request body cannot be serialized."""

    pass


class BodyCompressionError(BodyEncodingError):
    """Exception raised when gzip compression of the request body fails."""

    pass


class CallCancelledError(HTTPCallError):
    """Exception raised when the call context was cancelled before the request was sent."""

    pass


class DeadlineExceededError(HTTPCallError):
    """Exception raised when the call context deadline passed before the request was sent."""

    pass


class ResponseDecodeError(HTTPCallError, ValueError):
    """
    Exception raised when a response body cannot be decoded into the requested target.

    Attributes:
        message (str): Explanation of the error.
        status_code (int, optional): HTTP status code of the response that failed to decode.
        body (str, optional): Raw body of the response, when available.

    Args:
        message (str): Explanation of the error.
        status_code (int, optional): HTTP status code of the response that failed to decode.
        body (str, optional): Raw body of the response, when available.
    """

    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UnsupportedTargetTypeError(ResponseDecodeError):
    """Exception raised when a decoder cannot write into the given target type."""

    pass
