"""Signed webhook delivery with exponential backoff retry."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from src.webhook.errors import DeliveryError, SerializationError
from src.webhook.models import DeliveryResult, Endpoint
from src.webhook.signing import SIGNATURE_HEADER, signature_header

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
INITIAL_BACKOFF_SECONDS = 1.0
REQUEST_TIMEOUT_SECONDS = 10.0


def encode_payload(payload: dict[str, Any]) -> bytes:
    """Canonical JSON: sorted keys, compact separators, UTF-8."""
    try:
        text = json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(exc) from exc
    return text.encode()


class WebhookClient:
    """POSTs payloads to a single endpoint per call.

    Only transport failures (connect errors, timeouts, DNS) are retried
    unless ``retry_on_http_error`` is set, in which case non-2xx
    responses count as failed attempts too.
    """

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        initial_backoff_seconds: float = INITIAL_BACKOFF_SECONDS,
        request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        retry_on_http_error: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._initial_backoff = initial_backoff_seconds
        self._timeout = request_timeout_seconds
        self._retry_on_http_error = retry_on_http_error
        self._transport = transport

    async def deliver(self, payload: dict[str, Any], endpoint: Endpoint) -> DeliveryResult:
        # Serialized and signed once; every attempt resends these bytes.
        body = encode_payload(payload)
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: signature_header(body, endpoint.secret),
        }

        delay = self._initial_backoff
        last_error: BaseException | str = "no attempt made"

        async with httpx.AsyncClient(
            transport=self._transport, timeout=self._timeout,
        ) as client:
            for attempt in range(1, self._max_attempts + 1):
                try:
                    async with asyncio.timeout(self._timeout):
                        request = client.build_request(
                            "POST", endpoint.url, content=body, headers=headers,
                        )
                        # Response body is never read or decoded.
                        resp = await client.send(request, stream=True)
                        await resp.aclose()
                except httpx.InvalidURL as exc:
                    raise DeliveryError(endpoint, attempt, exc) from exc
                except (httpx.TransportError, TimeoutError) as exc:
                    last_error = exc
                else:
                    if resp.is_success or not self._retry_on_http_error:
                        logger.info(
                            "Successfully submitted webhook to %s on attempt %d (HTTP %d)",
                            endpoint.url, attempt, resp.status_code,
                        )
                        return DeliveryResult(
                            endpoint=endpoint,
                            attempts=attempt,
                            status_code=resp.status_code,
                        )
                    last_error = f"HTTP {resp.status_code}"

                logger.warning(
                    "Attempt %d to submit webhook to %s failed: %s",
                    attempt, endpoint.url, last_error,
                )
                if attempt < self._max_attempts:
                    await asyncio.sleep(delay)
                    delay *= 2

        logger.error(
            "Giving up on webhook %s after %d attempts: %s",
            endpoint.url, self._max_attempts, last_error,
        )
        if isinstance(last_error, BaseException):
            raise DeliveryError(endpoint, self._max_attempts, last_error) from last_error
        raise DeliveryError(endpoint, self._max_attempts, last_error)
