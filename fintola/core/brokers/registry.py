"""Supported brokerages and their OAuth endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fintola.core.exceptions import UnsupportedBrokerError


class TokenRequestFormat(str, Enum):
    FORM = "form"
    JSON = "json"


@dataclass(frozen=True)
class BrokerSpec:
    broker_id: str
    name: str
    auth_url: str
    api_key_param: str
    token_url: str
    token_format: TokenRequestFormat
    deep_link_scheme: str | None = None
    callback_path: str = "/api/broker-callback"


SUPPORTED_BROKERS: dict[str, BrokerSpec] = {
    "ZERODHA": BrokerSpec(
        broker_id="ZERODHA",
        name="Zerodha",
        auth_url="https://kite.zerodha.com/connect/login",
        api_key_param="api_key",
        token_url="https://api.kite.trade/session/token",
        token_format=TokenRequestFormat.FORM,
        deep_link_scheme="kite",
    ),
    "UPSTOX": BrokerSpec(
        broker_id="UPSTOX",
        name="Upstox",
        auth_url="https://api.upstox.com/v2/login/authorization",
        api_key_param="apiKey",
        token_url="https://api.upstox.com/v2/login/authorization/token",
        token_format=TokenRequestFormat.FORM,
        deep_link_scheme="upstox",
    ),
    "ANGELONE": BrokerSpec(
        broker_id="ANGELONE",
        name="Angel One",
        auth_url="https://smartapi.angelbroking.com/oauth",
        api_key_param="api_key",
        token_url="https://apiconnect.angelbroking.com/rest/auth/angelbroking/token",
        token_format=TokenRequestFormat.JSON,
    ),
}


def get_broker(broker_id: str | None) -> BrokerSpec:
    """Look up a broker; raises :class:`UnsupportedBrokerError` for unknown ids."""
    spec = SUPPORTED_BROKERS.get(broker_id or "")
    if spec is None:
        raise UnsupportedBrokerError(broker_id)
    return spec
