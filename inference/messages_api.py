import logging

import requests

from .base import ModelBackend
from .types import ModelRequest, ModelResponse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_API_VERSION = "2023-06-01"


def extract_text(data: dict) -> str:
    """Concatenate every "text" content block of a Messages API response."""
    blocks = data.get("content") or []
    return "".join(
        block.get("text", "")
        for block in blocks
        if isinstance(block, dict) and block.get("type") == "text"
    )


class MessagesAPIModelBackend(ModelBackend):
    """
    Hosted completion backend speaking the Messages API.

    One synchronous POST per request: a single user-role message holding
    the received text. Text content blocks in the response are joined into
    the output; other block types are dropped.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        api_url: str = DEFAULT_API_URL,
        api_version: str = DEFAULT_API_VERSION,
    ):
        """
        Initialize the backend.

        Args:
            api_key:     Value for the x-api-key header
            model_name:  Model identifier sent in the request body
            api_url:     Full messages endpoint URL
            api_version: Value for the anthropic-version header
        """
        self.api_key = api_key
        self.model_name = model_name
        self.api_url = api_url
        self.api_version = api_version

    def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Call the completion endpoint.

        Timeouts are recoverable; everything else (missing key, non-200,
        transport failure, undecodable body) is fatal for this request.
        """
        base_metadata = {
            "backend": "messages_api",
            "model": self.model_name,
        }

        if not self.api_key:
            return ModelResponse(
                status="fatal_error",
                error_type="not_configured",
                metadata={**base_metadata, "error": "LLM_API_KEY not configured"},
            )

        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model_name,
            "max_tokens": request.max_tokens,
            "messages": [{"role": "user", "content": request.prompt}],
        }

        try:
            resp = requests.post(
                self.api_url,
                json=payload,
                headers=headers,
                timeout=request.timeout_s,
            )

            if resp.status_code != 200:
                return ModelResponse(
                    status="fatal_error",
                    error_type="http_error",
                    metadata={
                        **base_metadata,
                        "status_code": resp.status_code,
                        "error": resp.text[:500],
                    },
                )

            data = resp.json()
            output = extract_text(data) if isinstance(data, dict) else ""

            if not output:
                return ModelResponse(
                    status="recoverable_error",
                    error_type="invalid_output",
                    metadata=base_metadata,
                )

            return ModelResponse(
                status="success",
                output=output,
                metadata={**base_metadata, "stop_reason": data.get("stop_reason")},
            )

        except requests.Timeout:
            return ModelResponse(
                status="recoverable_error",
                error_type="timeout",
                metadata=base_metadata,
            )

        except ValueError as e:
            return ModelResponse(
                status="fatal_error",
                error_type="invalid_output",
                metadata={**base_metadata, "error": str(e)},
            )

        except requests.RequestException as e:
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={**base_metadata, "error": str(e)},
            )
