from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import requests

from .channel import NotificationChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryReport:
    sent: int
    failed: int


class NotificationService:
    """Best-effort fan-out: a failed token never aborts the others."""

    def __init__(self, channel: NotificationChannel):
        self._channel = channel

    def broadcast(self, tokens: Sequence[str], *, title: str, body: str, data: Optional[dict] = None) -> DeliveryReport:
        sent = failed = 0
        for token in dict.fromkeys(tokens):
            try:
                self._channel.send(token, title=title, body=body, data=data)
                sent += 1
            except requests.RequestException as exc:
                failed += 1
                logger.warning("Push delivery to %s... failed: %s", token[:8], exc)

        if failed:
            logger.warning("Push broadcast '%s': %s sent, %s failed", title, sent, failed)
        return DeliveryReport(sent=sent, failed=failed)
