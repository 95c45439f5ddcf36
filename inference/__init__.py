"""
Model boundary layer for completion calls.

This package keeps the reply logic agnostic of the completion provider.

Supported backends:
- StubModelBackend: Deterministic fake model (local runs and tests)
- MessagesAPIModelBackend: Hosted Messages API

Example usage:
    from inference import StubModelBackend, ModelRequest

    backend = StubModelBackend()
    response = backend.generate(ModelRequest(prompt="Hello, world!"))
"""

from config import RelayConfig

from .types import ModelRequest, ModelResponse, ModelStatus
from .base import ModelBackend
from .stub import StubModelBackend
from .messages_api import MessagesAPIModelBackend


def create_model_backend(config: RelayConfig) -> ModelBackend:
    """Create the completion backend selected by LLM_BACKEND."""
    if config.llm_backend == "stub":
        return StubModelBackend()
    return MessagesAPIModelBackend(
        api_key=config.llm_api_key,
        model_name=config.llm_model,
        api_url=config.llm_api_url,
        api_version=config.llm_api_version,
    )


__all__ = [
    "ModelRequest",
    "ModelResponse",
    "ModelStatus",
    "ModelBackend",
    "StubModelBackend",
    "MessagesAPIModelBackend",
    "create_model_backend",
]
