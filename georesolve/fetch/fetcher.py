"""Single-shot JSON requests against provider endpoints."""
from __future__ import annotations

import time
from typing import Any, Dict, Mapping, Optional

import httpx
import orjson

from georesolve.errors import ParseError, TransportError
from georesolve.observability.tracing import log_fetch_result, span


async def fetch_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
    data: Optional[Mapping[str, str]] = None,
    auth: Optional[httpx.Auth | tuple[str, str]] = None,
    log_url: Optional[str] = None,
) -> Any:
    """Issue one request and decode its JSON body.

    There is no retry: a failed attempt is abandoned and the caller moves on.
    `log_url` replaces `url` in logs and errors when the path embeds a secret.
    """
    shown = log_url or url
    try:
        with span(name="fetch", url=shown):
            start = time.perf_counter()
            response = await client.request(
                method,
                url,
                params=params,
                headers=headers,
                data=data,
                auth=auth,
            )
    except httpx.HTTPError as exc:
        raise TransportError(f"{method} {shown} failed: {exc}") from exc

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    log_fetch_result(
        url=shown,
        status=response.status_code,
        bytes_read=len(response.content or b""),
        elapsed_ms=elapsed_ms,
    )
    if not response.is_success:
        raise TransportError(
            f"{method} {shown} returned {response.status_code} {response.reason_phrase}",
            status=response.status_code,
        )
    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError as exc:
        raise ParseError(f"{shown} returned malformed JSON: {exc}") from exc
