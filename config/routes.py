"""LLM route configuration for the assistant gateway."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    api_key_env: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    temperature: float | None = None


def default_route() -> LlmRoute:
    """Gemini through its OpenAI-compatible chat completions endpoint."""

    return LlmRoute(
        name="gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta/openai",
        endpoint="/chat/completions",
        model="gemini-2.0-flash",
        api_key_env="GOOGLE_AI_API_KEY",
    )


def load_route(path: Path) -> LlmRoute:
    """Load a route definition from a JSON file."""

    data = path.read_text(encoding="utf-8")
    return LlmRoute.model_validate_json(data)


def resolve_route(path: str | None) -> LlmRoute:
    """Return the route at ``path`` when configured, else the default."""

    if not path:
        return default_route()
    return load_route(Path(path))
