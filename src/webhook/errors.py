"""Exception hierarchy for webhook forwarding."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.models import MediaKind
    from src.webhook.models import Endpoint


class WebhookError(Exception):
    """Base class for every failure surfaced by the forwarder."""


class MediaExtractionError(Exception):
    """Raised by a media extractor when an attachment cannot be persisted."""


class BuildError(WebhookError):
    """Payload construction failed; nothing was sent."""

    def __init__(self, kind: MediaKind, cause: BaseException) -> None:
        self.kind = kind
        self.cause = cause
        super().__init__(f"Failed to download {kind.value}: {cause}")


class SignError(WebhookError):
    """Signing key material is unusable."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"error when create signature: {cause}")


class SerializationError(WebhookError):
    """Payload could not be encoded as JSON."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Failed to marshal body: {cause}")


class DeliveryError(WebhookError):
    """All attempts against one endpoint failed."""

    def __init__(self, endpoint: Endpoint, attempts: int, cause: BaseException | str) -> None:
        self.endpoint = endpoint
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"error when submit webhook to {endpoint.url} after {attempts} attempts: {cause}"
        )


class FanoutError(WebhookError):
    """One or more endpoints failed during a broadcast forward."""

    def __init__(self, errors: list[DeliveryError]) -> None:
        self.errors = errors
        urls = ", ".join(e.endpoint.url for e in errors)
        super().__init__(f"webhook delivery failed for {len(errors)} endpoint(s): {urls}")
