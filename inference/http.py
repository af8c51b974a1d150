import logging

import requests

from .base import ModelBackend
from .types import ModelRequest, ModelResponse

logger = logging.getLogger(__name__)


class HttpModelBackend(ModelBackend):
    """
    Remote chat backend.

    POSTs {"prompt": ...} to a single URL and reads the reply from the
    "response" field of the JSON answer.
    """

    name = "http"

    def __init__(self, url: str, bearer_token: str = ""):
        """
        Initialize HTTP backend.

        Args:
            url:          Full URL of the ask endpoint
            bearer_token: Sent as "Authorization: Bearer ..." when set
        """
        self.url = url
        self.bearer_token = bearer_token

    def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Ask the remote model for a reply.

        Timeouts are recoverable; everything else (connection refused,
        non-2xx, body without "response") is fatal.
        """
        base_metadata = {
            "backend": self.name,
            "url": self.url,
            "message_id": request.message_id,
        }

        headers = {"Content-Type": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"

        try:
            resp = requests.post(
                self.url,
                json={"prompt": request.prompt},
                headers=headers,
                timeout=request.timeout_s,
            )
            resp.raise_for_status()
            data = resp.json()

        except requests.Timeout:
            return ModelResponse(
                status="recoverable_error",
                error_type="timeout",
                metadata=base_metadata,
            )

        except (requests.RequestException, ValueError) as e:
            logger.debug(f"Model backend request failed: {e}")
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={**base_metadata, "error": str(e)},
            )

        output = data.get("response") if isinstance(data, dict) else None
        if not isinstance(output, str):
            return ModelResponse(
                status="fatal_error",
                error_type="invalid_output",
                metadata=base_metadata,
            )

        return ModelResponse(
            status="success",
            output=output,
            metadata=base_metadata,
        )
