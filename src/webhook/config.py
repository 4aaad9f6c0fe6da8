"""Forwarder configuration, read once at process start."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

from src.webhook.forwarder import FanoutMode
from src.webhook.models import Endpoint

_TRUTHY = {"1", "true", "yes", "on"}


class ForwarderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    webhook_urls: tuple[str, ...] = ()
    webhook_secret: str = "secret"
    media_path: str = "statics/media"
    own_jid: str = ""
    fanout_mode: FanoutMode = FanoutMode.FAIL_FAST
    max_attempts: int = Field(default=5, ge=1)
    initial_backoff_seconds: float = Field(default=1.0, ge=0)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    retry_on_http_error: bool = False

    @property
    def endpoints(self) -> list[Endpoint]:
        return [Endpoint(url=url, secret=self.webhook_secret) for url in self.webhook_urls]

    @classmethod
    def from_env(cls) -> ForwarderConfig:
        """Create config from environment variables."""
        urls = os.environ.get("WHATSAPP_WEBHOOK", "")
        return cls(
            webhook_urls=tuple(u.strip() for u in urls.split(",") if u.strip()),
            webhook_secret=os.environ.get("WHATSAPP_WEBHOOK_SECRET", "secret"),
            media_path=os.environ.get("WHATSAPP_MEDIA_PATH", "statics/media"),
            own_jid=os.environ.get("WHATSAPP_OWN_JID", ""),
            fanout_mode=FanoutMode(os.environ.get("WEBHOOK_FANOUT_MODE", "fail_fast")),
            max_attempts=int(os.environ.get("WEBHOOK_MAX_ATTEMPTS", "5")),
            initial_backoff_seconds=float(os.environ.get("WEBHOOK_BACKOFF_SECONDS", "1.0")),
            request_timeout_seconds=float(os.environ.get("WEBHOOK_TIMEOUT_SECONDS", "10.0")),
            retry_on_http_error=(
                os.environ.get("WEBHOOK_RETRY_ON_HTTP_ERROR", "").lower() in _TRUTHY
            ),
        )
