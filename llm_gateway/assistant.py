"""Conversational assistant client with bounded retry and backoff."""
from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from config import LlmRoute, default_route
from config.settings import settings

from .llm_gateway import GatewayResult, HttpClient, LlmGatewayError, Ok, TerminalFailure, TransientFailure, send

logger = logging.getLogger(__name__)

Transport = Callable[[Sequence[Dict[str, str]]], GatewayResult]


class AssistantUnavailable(LlmGatewayError):
    """Raised when the assistant exhausted its attempts or hit a terminal error."""

    code = "ASSISTANT_UNAVAILABLE"

    def __init__(self, last_failure: Optional[GatewayResult] = None) -> None:
        super().__init__("AssistantServiceUnavailable")
        self.last_failure = last_failure


class Assistant(Protocol):  # What the controller, sequencer and scorer need from a client
    def ask(self, prompt: str) -> str: ...

    def reset(self, history: Optional[Sequence[Dict[str, str]]] = None) -> None: ...


@dataclass(frozen=True)
class BackoffPolicy:
    """Exponential backoff with a cap and additive random jitter."""

    max_attempts: int = 4
    base_ms: int = 2000
    cap_ms: int = 8000
    jitter_ms: int = 200

    @classmethod
    def from_settings(cls) -> "BackoffPolicy":
        return cls(
            max_attempts=settings.ASSISTANT_MAX_ATTEMPTS,
            base_ms=settings.ASSISTANT_BACKOFF_BASE_MS,
            cap_ms=settings.ASSISTANT_BACKOFF_CAP_MS,
            jitter_ms=settings.ASSISTANT_JITTER_MS,
        )

    def delay_ms(self, failed_attempts: int, rng: Callable[[], float] = random.random) -> int:
        """Delay to wait after ``failed_attempts`` consecutive transient failures."""

        backoff = min(self.base_ms * (2 ** (failed_attempts - 1)), self.cap_ms)
        return backoff + int(rng() * self.jitter_ms)


class AssistantClient:  # Stateful chat wrapper around the LLM gateway
    def __init__(
        self,
        route: Optional[LlmRoute] = None,
        *,
        policy: Optional[BackoffPolicy] = None,
        client: Optional[HttpClient] = None,
        transport: Optional[Transport] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Callable[[], float] = random.random,
        stateless: bool = False,
    ) -> None:
        self._route = route or default_route()
        self._policy = policy or BackoffPolicy.from_settings()
        self._transport: Transport = transport or partial(send, cfg=self._route, client=client)
        self._sleep = sleep
        self._rng = rng
        self._stateless = stateless
        self._history: List[Dict[str, str]] = []
        self._lock = threading.Lock()

    @property
    def history(self) -> List[Dict[str, str]]:
        return list(self._history)

    def reset(self, history: Optional[Sequence[Dict[str, str]]] = None) -> None:  # Start a new chat, optionally seeded
        seeded = [
            {"role": str(item.get("role", "")), "content": str(item.get("content", ""))}
            for item in history or []
            if item.get("role") != "system"
        ]
        with self._lock:
            self._history = seeded

    def ask(self, prompt: str) -> str:
        """Send ``prompt`` and return the trimmed reply.

        Raises:
            AssistantUnavailable: after the final attempt, or immediately on a
                terminal failure.
        """

        result = self.ask_result(prompt)
        if isinstance(result, Ok):
            return result.text
        raise AssistantUnavailable(result)

    def ask_result(self, prompt: str) -> GatewayResult:
        """Run the retry loop and return the last tagged result."""

        with self._lock:
            messages = [] if self._stateless else list(self._history)
            messages.append({"role": "user", "content": prompt})
            result: GatewayResult = TransientFailure(reason="not attempted")
            for attempt in range(1, self._policy.max_attempts + 1):
                result = self._transport(messages)
                if isinstance(result, Ok):
                    if not self._stateless:
                        self._history.extend(
                            [
                                {"role": "user", "content": prompt},
                                {"role": "assistant", "content": result.text},
                            ]
                        )
                    return result
                logger.error(
                    "Assistant chat attempt %d/%d failed: %s (status=%s)",
                    attempt,
                    self._policy.max_attempts,
                    result.reason,
                    result.status,
                )
                if isinstance(result, TerminalFailure):
                    break
                if attempt < self._policy.max_attempts:
                    delay = self._policy.delay_ms(attempt, self._rng)
                    self._sleep(delay / 1000.0)
            logger.error("Assistant chat: service unavailable after retries.")
            return result


__all__ = ["Assistant", "AssistantClient", "AssistantUnavailable", "BackoffPolicy", "Transport"]
