"""Configuration package for the interview session service."""
from .routes import LlmRoute, default_route, load_route, resolve_route
from .settings import Settings, settings

__all__ = [
    "LlmRoute",
    "default_route",
    "load_route",
    "resolve_route",
    "Settings",
    "settings",
]
