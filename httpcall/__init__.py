__version__ = "1.0.0"

# Call builder imports
from httpcall._http_call import HTTPClientCall
from httpcall._models import HTTPClientCallResponse
from httpcall._context import CallContext

# Encoding-related imports
from httpcall._body import RawText, Structured, as_body, encode_body
from httpcall._decoder import (
    NO_DECODER,
    JSONResponseDecoder,
    ResponseDecoder,
    StringResponseDecoder,
    register_decoder,
    select_decoder,
)
from httpcall._query import encode_params, encode_without_escapes

# Transport and config-related imports
from httpcall._config import HTTPCallConfig
from httpcall._http_client import HTTPClient, HTTPRequest

__all__ = [
    "CallContext",
    "HTTPCallConfig",
    "HTTPClient",
    "HTTPClientCall",
    "HTTPClientCallResponse",
    "HTTPRequest",
    "JSONResponseDecoder",
    "NO_DECODER",
    "RawText",
    "ResponseDecoder",
    "StringResponseDecoder",
    "Structured",
    "as_body",
    "encode_body",
    "encode_params",
    "encode_without_escapes",
    "register_decoder",
    "select_decoder",
]
