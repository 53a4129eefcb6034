"""Broker connection records stored in user metadata."""

from __future__ import annotations

from typing import Literal

from fintola.core.models.base import CamelModel


class BrokerConnection(CamelModel):
    """Authorization URLs returned to the client that starts a connection."""

    auth_url: str
    mobile_deep_link: str | None = None
    session_id: str


class BrokerSession(CamelModel):
    broker: str | None = None
    status: Literal["pending", "completed"]
    timestamp: str | None = None
    completed_at: str | None = None


class BrokerToken(CamelModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: str | None = None
