from dataclasses import dataclass
from typing import Optional, Dict, Any, Literal

ModelStatus = Literal["success", "recoverable_error", "fatal_error"]


@dataclass
class ModelRequest:
    prompt: str                # the received message text, sent as the single user turn
    max_tokens: int = 1024
    timeout_s: Optional[float] = 10.0
    sender_id: Optional[str] = None


@dataclass
class ModelResponse:
    status: ModelStatus
    output: Optional[str] = None
    error_type: Optional[str] = None   # timeout | http_error | invalid_output | backend_unavailable | not_configured
    metadata: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "success" and bool(self.output)
