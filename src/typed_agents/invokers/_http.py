from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import InvokerError

logger = logging.getLogger(__name__)


async def post_json(
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """POST ``payload`` and return the decoded JSON body.

    Transport failures, non-2xx responses and bodies that are not a JSON
    object raise ``InvokerError``.
    """
    try:
        if client is not None:
            response = await client.post(url, json=payload, headers=headers, timeout=timeout)
        else:
            async with httpx.AsyncClient() as own_client:
                response = await own_client.post(url, json=payload, headers=headers, timeout=timeout)
    except httpx.HTTPError as exc:
        raise InvokerError(f"request to {url} failed: {exc}") from exc

    if not response.is_success:
        raise InvokerError(
            f"backend returned {response.status_code}: {response.text}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise InvokerError(f"failed to decode backend response: {exc}", status_code=response.status_code) from exc

    if not isinstance(data, dict):
        raise InvokerError(
            f"backend response is not a JSON object: {type(data).__name__}",
            status_code=response.status_code,
        )
    return data
