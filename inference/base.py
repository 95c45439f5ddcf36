from abc import ABC, abstractmethod
from .types import ModelRequest, ModelResponse


class ModelBackend(ABC):
    """
    Abstract completion boundary.
    Reply code must depend ONLY on this interface.
    """

    @abstractmethod
    def generate(self, request: ModelRequest) -> ModelResponse:
        """Generate a completion. Implementations report failures, never raise."""
        raise NotImplementedError
