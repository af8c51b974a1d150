from abc import ABC, abstractmethod
from .types import ModelRequest, ModelResponse


class ModelBackend(ABC):
    """
    Abstract model boundary.
    The relay depends ONLY on this interface.

    Implementations report failures through ModelResponse.status and
    never raise from generate().
    """

    # Reported as metadata["backend"] and in startup logs
    name: str = "abstract"

    @abstractmethod
    def generate(self, request: ModelRequest) -> ModelResponse:
        """Generate a reply for the prompt."""
        raise NotImplementedError
