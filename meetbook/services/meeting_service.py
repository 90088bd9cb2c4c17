"""Virtual-meeting provisioning.

``MeetingProvider`` is the capability the booking flow depends on. The Zoom
implementation uses Server-to-Server OAuth; callers fall back to
``fallback_meeting_link`` whenever provisioning fails.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import base64
import logging
import secrets
import string
import threading
import time

import httpx

from meetbook.core.config import settings

logger = logging.getLogger(__name__)

ZOOM_OAUTH_URL = "https://zoom.us/oauth/token"
ZOOM_API_BASE = "https://api.zoom.us/v2"


class MeetingProviderError(Exception):
    """Raised when a meeting could not be provisioned."""


@dataclass
class MeetingDetails:
    join_url: str
    meeting_id: str
    password: Optional[str] = None


class MeetingProvider(ABC):
    @abstractmethod
    def create_meeting(
        self, topic: str, start_time: datetime, duration_minutes: int = 60
    ) -> MeetingDetails:
        """Provision a meeting; raise MeetingProviderError on failure."""


def fallback_meeting_link() -> str:
    """Zoom-style placeholder used when the provider is unavailable."""
    meeting_id = 1000000000 + secrets.randbelow(9000000000)
    alphabet = string.ascii_lowercase + string.digits
    password = "".join(secrets.choice(alphabet) for _ in range(6))
    return f"https://zoom.us/j/{meeting_id}?pwd={password}"


class ZoomMeetingProvider(MeetingProvider):
    def __init__(
        self,
        account_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.account_id = account_id or settings.ZOOM_ACCOUNT_ID
        self.client_id = client_id or settings.ZOOM_CLIENT_ID
        self.client_secret = client_secret or settings.ZOOM_CLIENT_SECRET
        self.timeout = timeout or settings.ZOOM_TIMEOUT_SECONDS
        self.transport = transport
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._lock = threading.Lock()

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport)

    def _access_token(self, client: httpx.Client) -> str:
        with self._lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            if not (self.account_id and self.client_id and self.client_secret):
                raise MeetingProviderError("Zoom credentials not configured")

            credentials = base64.b64encode(
                f"{self.client_id}:{self.client_secret}".encode("utf-8")
            ).decode("ascii")
            resp = client.post(
                ZOOM_OAUTH_URL,
                params={"grant_type": "account_credentials", "account_id": self.account_id},
                headers={"Authorization": f"Basic {credentials}"},
            )
            if resp.status_code != 200:
                logger.error(f"Zoom token error: {resp.status_code} {resp.text}")
                raise MeetingProviderError("Failed to get Zoom access token")

            data = resp.json()
            self._token = data["access_token"]
            # Refresh a minute early
            self._token_expires_at = time.monotonic() + max(int(data.get("expires_in", 3600)) - 60, 0)
            return self._token

    def create_meeting(
        self, topic: str, start_time: datetime, duration_minutes: int = 60
    ) -> MeetingDetails:
        try:
            with self._client() as client:
                token = self._access_token(client)
                resp = client.post(
                    f"{ZOOM_API_BASE}/users/me/meetings",
                    headers={"Authorization": f"Bearer {token}"},
                    json={
                        "topic": topic,
                        "type": 2,  # scheduled
                        "start_time": start_time.isoformat(),
                        "duration": duration_minutes,
                        "timezone": settings.BOOKING_TIMEZONE,
                        "settings": {
                            "join_before_host": True,
                            "waiting_room": False,
                            "mute_upon_entry": True,
                            "auto_recording": "none",
                        },
                    },
                )
        except httpx.HTTPError as e:
            raise MeetingProviderError(f"Zoom request failed: {e}") from e

        if resp.status_code not in (200, 201):
            logger.error(f"Zoom meeting creation error: {resp.status_code} {resp.text}")
            raise MeetingProviderError("Failed to create Zoom meeting")

        meeting = resp.json()
        return MeetingDetails(
            join_url=meeting["join_url"],
            meeting_id=str(meeting["id"]),
            password=meeting.get("password"),
        )


_zoom_provider: Optional[ZoomMeetingProvider] = None


def get_meeting_provider() -> MeetingProvider:
    # Shared so the OAuth token cache survives across requests
    global _zoom_provider
    if _zoom_provider is None:
        _zoom_provider = ZoomMeetingProvider()
    return _zoom_provider
