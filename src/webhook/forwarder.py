"""Webhook forwarder: entry point invoked once per messaging event.

Pipeline per event:
1. Build the payload (media extraction included); abort on failure
2. Deliver to each configured endpoint in order
3. Fail fast on the first endpoint error, or attempt every endpoint
   and aggregate failures when running in broadcast mode
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from src.models import MessageEvent, ReceiptEvent
from src.webhook.delivery import WebhookClient
from src.webhook.errors import DeliveryError, FanoutError, WebhookError
from src.webhook.media import FileMediaExtractor
from src.webhook.payload import Payload, PayloadBuilder

if TYPE_CHECKING:
    from src.webhook.config import ForwarderConfig
    from src.webhook.media import MediaExtractor
    from src.webhook.models import DeliveryResult, Endpoint

logger = logging.getLogger(__name__)


class FanoutMode(str, Enum):
    FAIL_FAST = "fail_fast"
    BROADCAST = "broadcast"


class WebhookForwarder:
    """Forwards events to every configured webhook endpoint.

    Holds only read-only configuration, so one instance can serve
    concurrent ``forward`` calls for independent events.
    """

    def __init__(
        self,
        endpoints: list[Endpoint],
        builder: PayloadBuilder,
        client: WebhookClient,
        fanout_mode: FanoutMode = FanoutMode.FAIL_FAST,
    ) -> None:
        self._endpoints = tuple(endpoints)
        self._builder = builder
        self._client = client
        self._fanout_mode = fanout_mode

    @classmethod
    def from_config(
        cls,
        config: ForwarderConfig,
        extractor: MediaExtractor | None = None,
        client: WebhookClient | None = None,
    ) -> WebhookForwarder:
        builder = PayloadBuilder(
            extractor=extractor or FileMediaExtractor(),
            storage_root=config.media_path,
            own_jid=config.own_jid,
        )
        if client is None:
            client = WebhookClient(
                max_attempts=config.max_attempts,
                initial_backoff_seconds=config.initial_backoff_seconds,
                request_timeout_seconds=config.request_timeout_seconds,
                retry_on_http_error=config.retry_on_http_error,
            )
        return cls(
            endpoints=config.endpoints,
            builder=builder,
            client=client,
            fanout_mode=config.fanout_mode,
        )

    @property
    def endpoints(self) -> tuple[Endpoint, ...]:
        return self._endpoints

    async def forward(self, event: MessageEvent | ReceiptEvent) -> list[DeliveryResult]:
        """Build and deliver one event; raises a WebhookError on failure."""
        payload = await self._builder.build(event)
        label = "message" if isinstance(event, MessageEvent) else "receipt event"
        return await self.forward_payload(label, payload)

    async def forward_payload(self, label: str, payload: Payload) -> list[DeliveryResult]:
        """Deliver an already-built payload to all endpoints."""
        logger.info(
            "Forwarding %s to webhook: %s", label, [e.url for e in self._endpoints],
        )

        results: list[DeliveryResult] = []
        failures: list[DeliveryError] = []
        for endpoint in self._endpoints:
            try:
                results.append(await self._client.deliver(payload, endpoint))
            except DeliveryError as exc:
                if self._fanout_mode is FanoutMode.FAIL_FAST:
                    logger.error("Forwarding %s stopped at %s: %s", label, endpoint.url, exc)
                    raise
                failures.append(exc)
            except WebhookError as exc:
                # Signing and encoding failures abort in every fan-out mode.
                logger.error("Forwarding %s to %s failed: %s", label, endpoint.url, exc)
                raise

        if failures:
            logger.error(
                "Forwarding %s failed for %d of %d endpoints",
                label, len(failures), len(self._endpoints),
            )
            raise FanoutError(failures)

        logger.info("%s forwarded to webhook", label.capitalize())
        return results
