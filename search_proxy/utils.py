from typing import Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import quote

import httpx

QueryValue = Union[str, List[str]]


def _build_async_client(
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    max_redirects: int = 5,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"user-agent": "search-proxy/1.0"},
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        transport=transport,
    )


def normalize_key(text: str) -> str:
    """Cache key form of ``text``: surrounding whitespace dropped, case folded."""
    return text.strip().casefold()


def collapse_query(items: Iterable[Tuple[str, str]]) -> Dict[str, QueryValue]:
    """Turn multi-valued query pairs into a dict.

    A name seen once maps to its string; a repeated name maps to the list of
    its values, in order.
    """
    params: Dict[str, QueryValue] = {}
    for name, value in items:
        if name not in params:
            params[name] = value
            continue
        current = params[name]
        if isinstance(current, list):
            current.append(value)
        else:
            params[name] = [current, value]
    return params


def usable_keywords(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def header_safe(text: str) -> str:
    # Starlette encodes header values as latin-1; keep printable ASCII as-is.
    return quote(text, safe=" !\"#$&'()*+,-./:;<=>?@[]^_`{|}~")
