from .base import ModelBackend
from .types import ModelRequest, ModelResponse


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for local runs and tests.

    Never touches the network. A prompt of exactly "fail" produces a
    recoverable error so the fallback path can be exercised end to end.
    """

    def generate(self, request: ModelRequest) -> ModelResponse:
        if request.prompt == "fail":
            return ModelResponse(
                status="recoverable_error",
                error_type="invalid_output",
                metadata={"backend": "stub"},
            )

        return ModelResponse(
            status="success",
            output=f"Stub reply to: {request.prompt}",
            metadata={"backend": "stub"},
        )
