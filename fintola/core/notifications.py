"""Simulated notification channels.

No SMS provider is wired up; messages are logged and reported as sent.
"""

from __future__ import annotations

import asyncio

from loguru import logger


class SmsSender:
    """Simulated SMS gateway."""

    def __init__(self, simulated_latency_ms: int = 0) -> None:
        self.simulated_latency_ms = simulated_latency_ms

    async def send(self, phone_number: str, message: str) -> bool:
        """Send ``message`` to ``phone_number``; ``False`` when delivery fails."""
        try:
            logger.info(f"[SMS Simulation] To: {phone_number}, Message: {message}", channel="sms")
            if self.simulated_latency_ms > 0:
                await asyncio.sleep(self.simulated_latency_ms / 1000)
        except Exception as e:
            logger.error(f"Error sending SMS: {e}", channel="sms")
            return False
        return True


async def notify_other_devices(user_id: str, message: str) -> None:
    """Tell the user's other signed-in devices about ``message``."""
    logger.info(f"[NOTIFICATION] User {user_id}: {message}", user_id=user_id)
