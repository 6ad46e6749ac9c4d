from __future__ import annotations  # Re-export llm_gateway public API

from .assistant import Assistant, AssistantClient, AssistantUnavailable, BackoffPolicy
from .llm_gateway import (
    GatewayResult,
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    Ok,
    TerminalFailure,
    TransientFailure,
    classify,
    send,
)

__all__ = [
    "Assistant",
    "AssistantClient",
    "AssistantUnavailable",
    "BackoffPolicy",
    "GatewayResult",
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "Ok",
    "TerminalFailure",
    "TransientFailure",
    "classify",
    "send",
]
