import gzip
import json
import zlib
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from httpcall._constants import (
    ENCODING_GZIP,
    HEADER_ACCEPT_ENCODING,
    HEADER_CONTENT_ENCODING,
    HEADER_CONTENT_TYPE,
    HEADER_VARY,
    MIME_APPLICATION_JSON,
)
from httpcall.exceptions import BodyCompressionError, BodyEncodingError


@dataclass(frozen=True)
class RawText:
    """A request body sent as-is, encoded as UTF-8."""

    text: str


@dataclass(frozen=True)
class Structured:
    """A request body serialized to JSON before sending."""

    value: Any


Body = Union[RawText, Structured]


def as_body(value: Any) -> Optional[Body]:
    """
    Resolve an arbitrary body value into one of the two supported body shapes.

    Only two shapes are distinguished: ``str`` becomes RawText and every other value is treated
    as JSON-serializable and becomes Structured. RawText and Structured instances pass through,
    which lets callers force a shape explicitly (e.g. ``Structured("text")`` to send a JSON string).
    None means no body.
    """
    if value is None or isinstance(value, (RawText, Structured)):
        return value
    if isinstance(value, str):
        return RawText(value)
    return Structured(value)


@dataclass
class EncodedBody:
    """
    The result of encoding a request body.

    Attributes:
    -----------
    payload: bytes, optional
        The bytes to send, None when there is no body.
    content_length: int
        Length of the payload, 0 when there is no body.
    set_headers: Dict[str, str]
        Headers whose current value must be replaced.
    add_headers: List[Tuple[str, str]]
        Header values to append to any existing values.
    """

    payload: Optional[bytes] = None
    content_length: int = 0
    set_headers: Dict[str, str] = field(default_factory=dict)
    add_headers: List[Tuple[str, str]] = field(default_factory=list)


def _json_default(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_json(value: Any) -> bytes:
    """
    Serialize a structured body value to compact UTF-8 JSON.

    Dataclass instances and objects exposing ``to_dict()`` are serialized through that mapping.

    Raises:
    -------
    BodyEncodingError:
        If the value cannot be represented as JSON.
    """
    try:
        text = json.dumps(
            value,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
        return text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise BodyEncodingError(f"Failed to encode request body as JSON: {e}") from e


def gzip_compress(data: bytes) -> bytes:
    """
    Gzip-compress a payload.

    Raises:
    -------
    BodyCompressionError:
        If the gzip stream cannot be written.
    """
    try:
        return gzip.compress(data, mtime=0)
    except (OSError, zlib.error) as e:
        raise BodyCompressionError(f"Failed to gzip request body: {e}") from e


def encode_body(body: Any, gzip_compress_body: bool = False) -> EncodedBody:
    """
    Encode a request body into its payload and the header changes it implies.

    Parameters:
    ----------
    body: Any
        None, a str, a RawText/Structured instance, or any JSON-serializable value.
    gzip_compress_body: bool
        Whether the payload must be gzip-compressed.

    Returns:
    -------
    EncodedBody:
        The payload, its length and the header mutations to apply to the request.
        RawText bodies leave Content-Type untouched; Structured bodies force application/json.
        Compressed bodies add ``Content-Encoding: gzip`` and ``Vary: Accept-Encoding``.

    Raises:
    -------
    BodyEncodingError:
        If a structured body cannot be serialized.
    BodyCompressionError:
        If compression fails.
    """
    resolved = as_body(body)
    if resolved is None:
        return EncodedBody()

    encoded = EncodedBody()
    if isinstance(resolved, RawText):
        payload = resolved.text.encode("utf-8")
    else:
        payload = serialize_json(resolved.value)
        encoded.set_headers[HEADER_CONTENT_TYPE] = MIME_APPLICATION_JSON

    if gzip_compress_body:
        payload = gzip_compress(payload)
        encoded.add_headers.append((HEADER_CONTENT_ENCODING, ENCODING_GZIP))
        encoded.add_headers.append((HEADER_VARY, HEADER_ACCEPT_ENCODING))

    encoded.payload = payload
    encoded.content_length = len(payload)
    return encoded
