from __future__ import annotations  # LLM request gateway module

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Union

import httpx

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


@dataclass(frozen=True)
class Ok:  # Successful completion with trimmed text
    text: str


@dataclass(frozen=True)
class TransientFailure:  # Worth retrying: unavailable or network-indeterminate
    reason: str
    status: Optional[int] = None


@dataclass(frozen=True)
class TerminalFailure:  # Bad request, auth, quota or malformed reply
    reason: str
    status: Optional[int] = None


GatewayResult = Union[Ok, TransientFailure, TerminalFailure]

UNAVAILABLE_MARKER = "UNAVAILABLE"


def classify(status: Optional[int], detail: str = "") -> Union[TransientFailure, TerminalFailure]:
    """Map a failed call onto the transient/terminal split.

    A missing status means the request never got an answer, which is treated
    as a network problem and therefore transient.
    """

    reason = detail.strip().splitlines()[0][:200] if detail.strip() else ""
    if status is None:
        return TransientFailure(reason=reason or "transport failure")
    reason = reason or f"status {status}"
    if status == 503 or UNAVAILABLE_MARKER in detail.upper():
        return TransientFailure(reason=reason, status=status)
    return TerminalFailure(reason=reason, status=status)


def send(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
) -> GatewayResult:  # Perform one chat completion call without retrying
    payload: Dict[str, Any] = {"model": cfg.model, "messages": _normalize_messages(messages)}
    if cfg.temperature is not None:
        payload["temperature"] = cfg.temperature
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    logger.debug("LLM request send route=%s model=%s preview=%s", cfg.name, cfg.model, _preview(payload["messages"]))

    try:
        response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.warning("LLM transport failure route=%s: %s", cfg.name, exc)
        return classify(None, str(exc))

    try:
        if response.status_code >= 400:
            body = _safe_text(response)
            logger.warning("LLM error status route=%s status=%s", cfg.name, response.status_code)
            return classify(response.status_code, body)
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("Invalid JSON payload from LLM: %s", exc)
            return TerminalFailure(reason="LLM payload was not JSON", status=response.status_code)
        content = _extract_content(data)
        if content is None:
            return TerminalFailure(reason="LLM response missing content", status=response.status_code)
        return Ok(text=content.strip())
    finally:
        _close_safely(close_cb)


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        response = client.post(url, json=payload, headers=headers, timeout=timeout)
        return response, None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _safe_text(response: HttpResponse) -> str:
    try:
        return response.text or ""
    except Exception:  # noqa: BLE001
        return ""


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = str(item.get("content", ""))
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in reversed(messages):
        text = message.get("content", "").strip()
        if text:
            line = text.splitlines()[0]
            return line if len(line) <= 120 else line[:117] + "..."
    return ""


def _extract_content(data: Any) -> Optional[str]:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
        if isinstance(data.get("text"), str):
            return data["text"]
    if isinstance(data, str):
        return data
    return None

