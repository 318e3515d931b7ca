import codecs
import io
import json
from dataclasses import fields, is_dataclass
from typing import Any, List, Tuple

from httpcall._constants import MIME_APPLICATION_JSON, MIME_TEXT_HTML, MIME_TEXT_PLAIN
from httpcall.exceptions import ResponseDecodeError, UnsupportedTargetTypeError


class ResponseDecoder:
    """
    Base class for response body decoders.

    A decoder writes a raw response body into a caller-supplied target object.
    """

    def decode(self, data: bytes, target: Any, encoding: str = "utf-8") -> None:
        raise NotImplementedError


class JSONResponseDecoder(ResponseDecoder):
    """
    Decodes JSON response bodies into a mutable target.

    Supported targets:
    - dict: updated in place with the decoded JSON object.
    - list: replaced in place by the decoded JSON array.
    - dataclass instance: fields set from the JSON object keys, matched case-insensitively.
    - any other object with attributes: every JSON object key set as an attribute.
    """

    def decode(self, data: bytes, target: Any, encoding: str = "utf-8") -> None:
        try:
            value = json.loads(data.decode(encoding))
        except (UnicodeDecodeError, ValueError) as e:
            raise ResponseDecodeError(f"JSONResponseDecoder: invalid JSON body: {e}") from e

        # JSON null leaves any target untouched
        if value is None:
            return

        if isinstance(target, dict):
            self._expect(value, dict, target)
            target.update(value)
        elif isinstance(target, list):
            self._expect(value, list, target)
            target[:] = value
        elif is_dataclass(target) and not isinstance(target, type):
            self._expect(value, dict, target)
            self._populate_dataclass(value, target)
        elif hasattr(target, "__dict__") and not isinstance(target, (type, io.IOBase)):
            self._expect(value, dict, target)
            for key, item in value.items():
                setattr(target, key, item)
        else:
            raise UnsupportedTargetTypeError(f"JSONResponseDecoder: unsupported type {type(target).__name__}")

    @staticmethod
    def _expect(value: Any, expected: type, target: Any) -> None:
        if not isinstance(value, expected):
            raise ResponseDecodeError(
                f"JSONResponseDecoder: cannot decode JSON {type(value).__name__} into {type(target).__name__}"
            )

    @staticmethod
    def _populate_dataclass(value: dict, target: Any) -> None:
        folded = {key.lower(): key for key in value}
        for target_field in fields(target):
            if target_field.name in value:
                setattr(target, target_field.name, value[target_field.name])
            elif target_field.name.lower() in folded:
                setattr(target, target_field.name, value[folded[target_field.name.lower()]])


class StringResponseDecoder(ResponseDecoder):
    """
    Decodes plain text or HTML response bodies into a seekable text buffer such as io.StringIO.

    Any previous content of the buffer is replaced.
    """

    def decode(self, data: bytes, target: Any, encoding: str = "utf-8") -> None:
        if not isinstance(target, io.TextIOBase):
            raise UnsupportedTargetTypeError(f"StringResponseDecoder: unsupported type {type(target).__name__}")
        target.seek(0)
        target.truncate()
        target.write(data.decode(encoding, errors="replace"))


class NoResponseDecoder(ResponseDecoder):
    """Sentinel decoder for content types without a registered decoder; leaves the target untouched."""

    def decode(self, data: bytes, target: Any, encoding: str = "utf-8") -> None:
        return None

    def __repr__(self) -> str:
        return "NO_DECODER"


NO_DECODER = NoResponseDecoder()

_DECODERS: List[Tuple[str, ResponseDecoder]] = [
    (MIME_APPLICATION_JSON, JSONResponseDecoder()),
    (MIME_TEXT_PLAIN, StringResponseDecoder()),
    (MIME_TEXT_HTML, StringResponseDecoder()),
]


def register_decoder(content_type: str, decoder: ResponseDecoder) -> None:
    """
    Register a decoder for responses whose Content-Type contains ``content_type``.

    Registered decoders are matched in registration order, after the built-in ones.
    """
    if not content_type:
        raise ValueError("content_type must not be empty")
    _DECODERS.append((content_type.lower(), decoder))


def select_decoder(content_type: str) -> ResponseDecoder:
    """
    Select the decoder for a response Content-Type.

    Returns:
    -------
    ResponseDecoder:
        The first decoder whose content type is contained in ``content_type``,
        or NO_DECODER when none matches.
    """
    normalized = (content_type or "").lower()
    for mime, decoder in _DECODERS:
        if mime in normalized:
            return decoder
    return NO_DECODER


def content_charset(content_type: str, default: str = "utf-8") -> str:
    """Return the charset parameter of a Content-Type header, or ``default``."""
    for param in (content_type or "").split(";")[1:]:
        name, _, value = param.strip().partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default


def decode_response(content_type: str, data: bytes, target: Any) -> bool:
    """
    Decode a response body into ``target`` using the decoder selected for ``content_type``.

    Returns:
    -------
    bool:
        True if a decoder was applied, False if the content type has no decoder.
    """
    decoder = select_decoder(content_type)
    if decoder is NO_DECODER:
        return False
    encoding = content_charset(content_type)
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ResponseDecodeError(f"Unknown response charset '{encoding}'") from e
    decoder.decode(data, target, encoding)
    return True
