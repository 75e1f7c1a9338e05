"""Factories for geocoding HTTP sessions."""
from __future__ import annotations

import contextlib
from typing import AsyncIterator, Optional

import httpx


@contextlib.asynccontextmanager
async def create_geocoding_session(
    *,
    user_agent: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a configured `httpx.AsyncClient` for the duration of the context."""
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    async with httpx.AsyncClient(headers=headers, timeout=timeout, transport=transport) as client:
        yield client
