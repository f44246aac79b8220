"""
Things service client used to check that a channel exists and is visible
to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import Settings
from .errors import ChannelLookupError

logger = logging.getLogger(__name__)


class ThingsClient:
    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = settings.things_url.rstrip("/")
        self.timeout = settings.request_timeout
        self.session = session or requests.Session()

    def channel(self, channel_id: str, token: str) -> Dict[str, Any]:
        """
        Fetch a channel with the caller's token.

        Raises:
            ChannelLookupError: if the channel is missing, not accessible, or
                the things service cannot be reached
        """
        if not channel_id:
            raise ChannelLookupError("Channel id is empty")

        url = f"{self.base_url}/channels/{channel_id}"
        logger.debug("Things request: %s", url)

        try:
            response = self.session.get(
                url,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Things service unreachable: %s", exc)
            raise ChannelLookupError(f"Things service unreachable: {exc}") from exc

        if response.status_code != 200:
            logger.warning(
                "Channel lookup for %s failed: %s - %s",
                channel_id,
                response.status_code,
                response.text[:200],
            )
            raise ChannelLookupError(
                f"Channel {channel_id} lookup failed with status {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ChannelLookupError(f"Invalid channel payload for {channel_id}") from exc
