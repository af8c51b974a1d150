"""
Model boundary layer for LLM inference.

This package provides a clean abstraction for model invocation,
allowing the relay to remain agnostic of the underlying backend.

Supported backends:
- StubModelBackend: Deterministic fake model (default for CI/tests)
- HttpModelBackend: Remote chat endpoint taking {"prompt"} and answering {"response"}

Example usage:
    from inference import StubModelBackend, ModelRequest

    backend = StubModelBackend()
    request = ModelRequest(prompt="Hello, world!")
    response = backend.generate(request)
"""

from .types import ModelRequest, ModelResponse, ModelStatus
from .base import ModelBackend
from .stub import StubModelBackend
from .http import HttpModelBackend

__all__ = [
    "ModelRequest",
    "ModelResponse",
    "ModelStatus",
    "ModelBackend",
    "StubModelBackend",
    "HttpModelBackend",
]
