"""Broker OAuth integrations."""

from fintola.core.brokers.oauth import BrokerConnector
from fintola.core.brokers.registry import SUPPORTED_BROKERS, BrokerSpec, TokenRequestFormat, get_broker

__all__ = ["BrokerConnector", "SUPPORTED_BROKERS", "BrokerSpec", "TokenRequestFormat", "get_broker"]
