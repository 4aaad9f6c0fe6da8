"""Data models for webhook delivery."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Endpoint:
    """A webhook destination and the secret its payloads are signed with."""

    url: str
    secret: str


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a successful delivery to one endpoint."""

    endpoint: Endpoint
    attempts: int
    status_code: int
