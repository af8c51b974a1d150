from typing import Optional

from .base import ModelBackend
from .types import ModelRequest, ModelResponse


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for testing and CI.

    Replies with a fixed text, or fails with the configured error_type.
    Every prompt it sees is kept in `prompts`.
    """

    name = "stub"

    def __init__(self, reply: str = "This is a stubbed response.", error_type: Optional[str] = None):
        self.reply = reply
        self.error_type = error_type
        self.prompts: list[str] = []

    def generate(self, request: ModelRequest) -> ModelResponse:
        self.prompts.append(request.prompt)

        if self.error_type:
            return ModelResponse(
                status="fatal_error",
                error_type=self.error_type,
                metadata={"backend": self.name, "message_id": request.message_id},
            )

        return ModelResponse(
            status="success",
            output=self.reply,
            metadata={"backend": self.name, "message_id": request.message_id},
        )
