"""
Configuration management for the WhatsApp relay.

Loads environment variables from .env file and builds a single immutable
RelayConfig value at process start. Nothing reads the environment after that.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


InboundSchemaType = Literal["nested", "flat"]
ReplyPolicyType = Literal["greeting", "echo", "completion"]
LLMBackendType = Literal["messages_api", "stub"]

INBOUND_SCHEMAS = ("nested", "flat")
REPLY_POLICIES = ("greeting", "echo", "completion")
LLM_BACKENDS = ("messages_api", "stub")

DEFAULT_GREETING = "Welcome to FeedMe - the first AI chat to feed you!"
DEFAULT_ECHO_PREFIX = "You said: "
DEFAULT_FALLBACK = "Sorry, I couldn't come up with a reply right now. Please try again later."


@dataclass(frozen=True)
class RelayConfig:
    """Relay configuration, constructed once and never mutated."""

    # WhatsApp Cloud API
    whatsapp_token: str = ""
    whatsapp_phone_id: str = ""
    verify_token: str = ""
    app_secret: Optional[str] = None
    api_version: str = "v18.0"
    graph_base_url: str = "https://graph.facebook.com"
    webhook_path: str = "/webhook"

    # Relay behaviour
    inbound_schema: InboundSchemaType = "nested"
    reply_policy: ReplyPolicyType = "greeting"
    greeting_text: str = DEFAULT_GREETING
    echo_prefix: str = DEFAULT_ECHO_PREFIX
    fallback_text: str = DEFAULT_FALLBACK

    # Completion API
    llm_backend: LLMBackendType = "messages_api"
    llm_api_key: str = field(default="", repr=False)
    llm_model: str = "claude-3-haiku-20240307"
    llm_api_url: str = "https://api.anthropic.com/v1/messages"
    llm_api_version: str = "2023-06-01"
    llm_max_tokens: int = 1024

    # Applies to every outbound call
    outbound_timeout_s: float = 10.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    environment: str = "development"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.inbound_schema not in INBOUND_SCHEMAS:
            raise ValueError(
                f"INBOUND_SCHEMA must be one of {INBOUND_SCHEMAS}, got {self.inbound_schema!r}"
            )
        if self.reply_policy not in REPLY_POLICIES:
            raise ValueError(
                f"REPLY_POLICY must be one of {REPLY_POLICIES}, got {self.reply_policy!r}"
            )
        if self.llm_backend not in LLM_BACKENDS:
            raise ValueError(
                f"LLM_BACKEND must be one of {LLM_BACKENDS}, got {self.llm_backend!r}"
            )
        if self.outbound_timeout_s <= 0:
            raise ValueError("OUTBOUND_TIMEOUT_S must be positive")

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """
        Load configuration from environment variables.

        Secrets default to empty strings: a missing token makes the outbound
        call fail when it is attempted, not at startup.
        """
        return cls(
            # WhatsApp Configuration
            whatsapp_token=os.getenv("WHATSAPP_TOKEN", ""),
            whatsapp_phone_id=os.getenv("WHATSAPP_PHONE_ID", ""),
            verify_token=os.getenv("WHATSAPP_VERIFY_TOKEN", ""),
            app_secret=os.getenv("WHATSAPP_APP_SECRET") or None,
            api_version=os.getenv("WHATSAPP_API_VERSION", "v18.0"),
            graph_base_url=os.getenv("WHATSAPP_GRAPH_URL", "https://graph.facebook.com"),
            webhook_path=os.getenv("WEBHOOK_PATH", "/webhook"),

            # Relay Configuration
            inbound_schema=os.getenv("INBOUND_SCHEMA", "nested").lower(),  # type: ignore
            reply_policy=os.getenv("REPLY_POLICY", "greeting").lower(),  # type: ignore
            greeting_text=os.getenv("REPLY_GREETING", DEFAULT_GREETING),
            echo_prefix=os.getenv("REPLY_ECHO_PREFIX", DEFAULT_ECHO_PREFIX),
            fallback_text=os.getenv("REPLY_FALLBACK", DEFAULT_FALLBACK),

            # LLM Configuration
            llm_backend=os.getenv("LLM_BACKEND", "messages_api").lower(),  # type: ignore
            llm_api_key=os.getenv("LLM_API_KEY", ""),
            llm_model=os.getenv("LLM_MODEL", "claude-3-haiku-20240307"),
            llm_api_url=os.getenv("LLM_API_URL", "https://api.anthropic.com/v1/messages"),
            llm_api_version=os.getenv("LLM_API_VERSION", "2023-06-01"),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1024")),

            outbound_timeout_s=float(os.getenv("OUTBOUND_TIMEOUT_S", "10")),

            # Server
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT") or "8080"),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def missing_settings(self) -> List[str]:
        """Names of required settings that are not set."""
        required = {
            "WHATSAPP_TOKEN": self.whatsapp_token,
            "WHATSAPP_PHONE_ID": self.whatsapp_phone_id,
            "WHATSAPP_VERIFY_TOKEN": self.verify_token,
        }
        if self.reply_policy == "completion" and self.llm_backend == "messages_api":
            required["LLM_API_KEY"] = self.llm_api_key
        return [name for name, value in required.items() if not value]

    def public_info(self) -> dict:
        """Non-sensitive view of the configuration."""
        return {
            "environment": self.environment,
            "webhook_path": self.webhook_path,
            "inbound_schema": self.inbound_schema,
            "reply_policy": self.reply_policy,
            "llm_backend": self.llm_backend,
            "llm_model": self.llm_model,
            "api_version": self.api_version,
            "signature_verification": self.app_secret is not None,
            "whatsapp_token_set": bool(self.whatsapp_token),
            "verify_token_set": bool(self.verify_token),
            "port": self.port,
        }


if __name__ == "__main__":
    # Test configuration loading
    config = RelayConfig.from_env()
    missing = config.missing_settings()
    print("Configuration loaded:")
    for key, value in config.public_info().items():
        print(f"  {key}: {value}")
    print(f"\n  Validation: {'✓ PASSED' if not missing else '✗ MISSING ' + ', '.join(missing)}")
