"""
Broker OAuth connection flow.

A connection starts on one device (``start_connection``), the user signs in
at the broker, and the broker redirects to the callback route which trades
the authorization code for an access token (``exchange_code``) and records
the result (``complete_connection``). Every step is a single attempt.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import quote, urlencode

import httpx
from loguru import logger

from fintola.core.auth import UserMetadataStore
from fintola.core.brokers.registry import BrokerSpec, TokenRequestFormat, get_broker
from fintola.core.config import AppConfig
from fintola.core.exceptions import BrokerConfigurationError, MissingAccessTokenError, TokenExchangeError
from fintola.core.models import BrokerConnection, BrokerSession, BrokerToken
from fintola.core.monitoring import get_metrics_collector
from fintola.core.notifications import notify_other_devices


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class BrokerConnector:
    """Runs the connect/callback flow for the supported brokers."""

    def __init__(
        self,
        config: AppConfig,
        store: UserMetadataStore,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.timeout = timeout
        self._transport = transport

    @property
    def app_url(self) -> str:
        return self.config.server.app_url.rstrip("/")

    def callback_url(self, spec: BrokerSpec, user_id: str, session_id: str) -> str:
        query = urlencode({"brokerId": spec.broker_id, "userId": user_id, "sessionId": session_id})
        return f"{self.app_url}{spec.callback_path}?{query}"

    async def start_connection(self, user_id: str, broker_id: str | None) -> BrokerConnection:
        """Build the authorization URLs and record a pending session."""
        spec = get_broker(broker_id)
        api_key = self.config.broker_credentials(spec.broker_id).api_key
        if not api_key:
            raise BrokerConfigurationError(spec.broker_id)

        session_id = f"{user_id}-{int(time.time() * 1000)}"
        callback_url = self.callback_url(spec, user_id, session_id)
        auth_url = f"{spec.auth_url}?" + urlencode(
            {spec.api_key_param: api_key, "redirect_uri": callback_url, "response_type": "code"}
        )

        mobile_deep_link = None
        if spec.deep_link_scheme:
            mobile_deep_link = (
                f"{spec.deep_link_scheme}://login?{spec.api_key_param}={api_key}"
                f"&redirect_uri={quote(callback_url, safe='')}"
            )

        timestamp = _now_iso()
        await self.store.update_metadata(
            user_id,
            public={
                "brokerConnectAttempt": {"broker": spec.broker_id, "timestamp": timestamp, "sessionId": session_id}
            },
        )
        session = BrokerSession(broker=spec.broker_id, status="pending", timestamp=timestamp)
        await self.store.update_metadata(
            user_id,
            private={"brokerSessions": {session_id: session.model_dump(by_alias=True, exclude_none=True)}},
        )

        logger.info("Broker connection started", broker=spec.broker_id, user_id=user_id, session_id=session_id)
        return BrokerConnection(auth_url=auth_url, mobile_deep_link=mobile_deep_link, session_id=session_id)

    def _token_request(self, spec: BrokerSpec, code: str) -> dict[str, Any]:
        credentials = self.config.broker_credentials(spec.broker_id)
        api_key = credentials.api_key or ""
        api_secret = credentials.api_secret or ""

        if spec.broker_id == "ZERODHA":
            return {
                "data": {"api_key": api_key, "request_token": code, "api_secret": api_secret},
                "headers": {"X-Kite-Version": "3"},
            }
        if spec.broker_id == "UPSTOX":
            return {
                "data": {
                    "code": code,
                    "client_id": api_key,
                    "client_secret": api_secret,
                    "redirect_uri": f"{self.app_url}{spec.callback_path}",
                    "grant_type": "authorization_code",
                }
            }
        body = {"code": code, "client_id": api_key, "client_secret": api_secret, "grant_type": "authorization_code"}
        if spec.token_format is TokenRequestFormat.JSON:
            return {"json": body}
        return {"data": body}

    async def exchange_code(self, broker_id: str, code: str) -> dict[str, Any]:
        """POST the authorization code to the broker's token endpoint and return its JSON body."""
        spec = get_broker(broker_id)
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), transport=self._transport) as client:
            try:
                response = await client.post(spec.token_url, **self._token_request(spec, code))
                payload = response.json()
            except (httpx.HTTPError, ValueError) as e:
                raise TokenExchangeError(f"Token exchange failed: {e}", spec.broker_id) from e

        if not isinstance(payload, dict):
            raise TokenExchangeError(
                "Unexpected token response", spec.broker_id, upstream_status=response.status_code
            )
        return payload

    async def complete_connection(
        self, user_id: str, broker_id: str, session_id: str, token_response: dict[str, Any]
    ) -> BrokerToken:
        """Mark the session completed and store the broker token."""
        access_token = token_response.get("access_token")
        if not access_token:
            raise MissingAccessTokenError(broker_id)

        completed_at = _now_iso()
        await self.store.update_metadata(
            user_id,
            private={"brokerSessions": {session_id: {"status": "completed", "completedAt": completed_at}}},
        )

        expires_in = token_response.get("expires_in")
        expires_at = None
        if expires_in:
            expires_at = (datetime.now(UTC) + timedelta(seconds=float(expires_in))).isoformat().replace("+00:00", "Z")
        token = BrokerToken(
            access_token=access_token,
            refresh_token=token_response.get("refresh_token"),
            expires_at=expires_at,
        )
        await self.store.update_metadata(
            user_id,
            private={"brokerTokens": {broker_id: token.model_dump(by_alias=True)}},
            public={"connectedBrokers": {broker_id: {"connected": True, "connectedAt": completed_at}}},
        )

        await notify_other_devices(user_id, f"{broker_id} broker connected successfully")
        return token

    async def handle_callback(self, code: str, broker_id: str, user_id: str, session_id: str) -> BrokerToken:
        """Exchange ``code`` and record the connection, counting the outcome."""
        metrics = get_metrics_collector()
        try:
            token_response = await self.exchange_code(broker_id, code)
        except Exception:
            metrics.record_token_exchange(broker_id, "failure")
            raise

        if not token_response.get("access_token"):
            metrics.record_token_exchange(broker_id, "missing_token")
            raise MissingAccessTokenError(broker_id)

        try:
            token = await self.complete_connection(user_id, broker_id, session_id, token_response)
        except Exception:
            metrics.record_token_exchange(broker_id, "failure")
            raise
        metrics.record_token_exchange(broker_id, "success")
        return token
