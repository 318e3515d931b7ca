from typing import Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

QueryParams = Mapping[str, Union[str, Iterable[str]]]


def _iter_pairs(params: QueryParams) -> List[Tuple[str, str]]:
    pairs = []
    for key in sorted(params):
        values = params[key]
        if isinstance(values, str):
            values = [values]
        for value in values:
            pairs.append((key, value))
    return pairs


def encode_without_escapes(params: Optional[QueryParams]) -> str:
    """
    Encode query parameters as ``key=value`` pairs without any escaping.

    Keys are emitted in sorted order and multi-valued keys are repeated. Reserved characters
    inside values, including ``&`` and ``=``, are written as-is; callers must only pass values
    that do not break the query grammar.

    Parameters:
    ----------
    params: Mapping[str, Iterable[str]], optional
        Parameter names mapped to their values.

    Returns:
    -------
    str:
        The query string, without a leading ``?``.
    """
    if not params:
        return ""
    return "&".join(f"{key}={value}" for key, value in _iter_pairs(params))


def encode_params(params: Optional[QueryParams], escape: bool = True) -> str:
    """
    Encode query parameters in escaped (percent-encoded) or raw mode.

    In raw mode the only substitution applied is space to ``+``.
    """
    if not params:
        return ""
    if escape:
        return urlencode(_iter_pairs(params))
    return encode_without_escapes(params).replace(" ", "+")
