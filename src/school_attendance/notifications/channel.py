from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """Push delivery to a single device token; raises on delivery failure."""

    def send(self, token: str, *, title: str, body: str, data: Optional[dict] = None) -> None:
        raise NotImplementedError


class WebPushChannel(NotificationChannel):
    """Posts messages to an HTTP push gateway (FCM-style JSON payload)."""

    def __init__(self, endpoint: str, server_key: str = "", *, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._endpoint = endpoint
        self._server_key = server_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def send(self, token: str, *, title: str, body: str, data: Optional[dict] = None) -> None:
        headers = {"Content-Type": "application/json"}
        if self._server_key:
            headers["Authorization"] = f"key={self._server_key}"

        payload = {"to": token, "notification": {"title": title, "body": body}}
        if data:
            payload["data"] = data

        logger.debug("Sending push notification to %s", self._endpoint)
        response = self._session.post(self._endpoint, json=payload, headers=headers, timeout=self._timeout)
        response.raise_for_status()


class LoggingChannel(NotificationChannel):
    """Used when no push endpoint is configured."""

    def send(self, token: str, *, title: str, body: str, data: Optional[dict] = None) -> None:
        logger.info("Push (not sent, no endpoint configured) to %s...: %s - %s", token[:8], title, body)
