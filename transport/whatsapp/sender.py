"""
WhatsApp Cloud API Client

Sends messages and read receipts to WhatsApp.
No formatting intelligence. No retries. No logic.
"""

import logging
from typing import Any, Optional

import httpx

from relay.errors import CollaboratorTransportError

from .schemas import (
    MarkAsReadPayload,
    OutboundMessageRequest,
    OutboundText,
    SendMessagePayload,
    SendResult,
)

logger = logging.getLogger(__name__)


class WhatsAppSenderError(CollaboratorTransportError):
    """
    Failed to talk to WhatsApp.

    `result` is set when the API answered but reported a failure.
    """

    def __init__(self, message: str, result: Optional[SendResult] = None):
        super().__init__(message)
        self.result = result


class WhatsAppClient:
    """
    Thin client over POST {base_url}/{phone_number_id}/messages.

    One request per call. The httpx.AsyncClient can be injected (tests use
    httpx.MockTransport); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client
        self.timeout = timeout

    def _endpoint(self, phone_number_id: str) -> str:
        return f"{self.base_url}/{phone_number_id}/messages"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, phone_number_id: str, payload: dict[str, Any]) -> httpx.Response:
        endpoint = self._endpoint(phone_number_id)
        logger.debug(f"POST {endpoint}", extra={"payload": payload})

        try:
            if self.http_client is not None:
                return await self.http_client.post(
                    endpoint, json=payload, headers=self._headers(), timeout=self.timeout
                )
            async with httpx.AsyncClient() as client:
                return await client.post(
                    endpoint, json=payload, headers=self._headers(), timeout=self.timeout
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise WhatsAppSenderError(f"failed to execute request: {e}") from e

    async def send_message(self, request: OutboundMessageRequest) -> SendResult:
        """
        Send one message.

        Returns:
            SendResult with status "sent" and the WhatsApp message id

        Raises:
            WhatsAppSenderError: request failed. `.result` carries the
                API's failure report when there was one.
        """

        message_type = request.message_type or "text"

        payload = SendMessagePayload(to=request.to, type=message_type)
        # Only text bodies are supported for now
        if message_type == "text":
            payload.text = OutboundText(body=request.content)

        response = await self._post(
            request.phone_number_id, payload.model_dump(exclude_none=True)
        )

        try:
            body = response.json()
        except ValueError as e:
            raise WhatsAppSenderError(f"failed to decode response: {e}") from e

        if response.status_code != 200:
            error = (body.get("error") if isinstance(body, dict) else None) or {}
            error_message = error.get("message", "")
            error_code = error.get("code", 0)
            logger.error(
                f"WhatsApp API error: {response.status_code} - {error_message}",
                extra={
                    "status_code": response.status_code,
                    "error_code": error_code,
                },
            )
            raise WhatsAppSenderError(
                f"API error: {error_message} (code: {error_code})",
                result=SendResult(status="failed", message=error_message),
            )

        messages = (body.get("messages") if isinstance(body, dict) else None) or []
        first = messages[0] if isinstance(messages, list) and messages else None
        message_id = first.get("id") if isinstance(first, dict) else None
        if not message_id:
            raise WhatsAppSenderError(
                "no message ID returned from API",
                result=SendResult(status="failed", message="No message ID returned from API"),
            )

        logger.info(
            f"Message sent to {request.to}",
            extra={"to": request.to, "response_id": message_id},
        )
        return SendResult(message_id=message_id, status="sent")

    async def mark_as_read(self, phone_number_id: str, message_id: str) -> None:
        """
        Send a read receipt for an inbound message.

        Raises:
            WhatsAppSenderError: request failed or API answered non-200
        """

        payload = MarkAsReadPayload(message_id=message_id)
        response = await self._post(phone_number_id, payload.model_dump())

        if response.status_code != 200:
            raise WhatsAppSenderError(f"API error: status code {response.status_code}")
