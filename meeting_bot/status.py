"""
Status Reporter

Posts session progress ("stages") to the backend so the UI can follow a
bot through launch, join and admission. Delivery is fire-and-forget: the
join flow never waits on the network and failures are only logged.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Set

import httpx

from meeting_bot.config import settings, StatusSettings
from meeting_bot.core.logging import get_logger


logger = get_logger("status")


class StatusReporter:
    """
    Sends status updates to ``<api_base_url><endpoint>``.

    Instances are callable with the controller status callback signature,
    so one can be passed straight in as ``SessionConfig.send_status_update``.
    """

    def __init__(
        self,
        session_id: Optional[str],
        status_settings: Optional[StatusSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.session_id = session_id
        self._settings = status_settings or settings.status
        self._client = client
        self._owns_client = client is None
        self._pending: Set[asyncio.Task] = set()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.api_base_url,
                headers={"Content-Type": "application/json"},
                timeout=self._settings.timeout_seconds,
            )
        return self._client

    def build_payload(self, stage: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "stage": stage,
            "message": message,
            "metadata": metadata or {},
        }

    def send(self, stage: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> Optional[asyncio.Task]:
        """
        Schedule a status update without waiting for it.

        Returns:
            The background task, or None if the update was skipped.
        """
        if not self.session_id:
            logger.warning(f"Cannot send status update ({stage}): no session id")
            return None

        task = asyncio.ensure_future(self._post(self.build_payload(stage, message, metadata)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def __call__(self, stage: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        # Returning the task would make callers await the POST
        self.send(stage, message, metadata)

    async def _post(self, payload: Dict[str, Any]) -> bool:
        stage = payload["stage"]
        try:
            response = await self._get_client().post(self._settings.endpoint, json=payload)
            if 200 <= response.status_code < 300:
                logger.debug(f"Status update sent successfully (stage={stage}, status={response.status_code})")
                return True
            logger.debug(f"Status update returned {response.status_code} (stage={stage})")
            return False
        except httpx.HTTPError as e:
            logger.debug(f"Failed to send status update (stage={stage}): {e}")
            return False

    async def close(self) -> None:
        """Wait for outstanding updates and close the HTTP client."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
