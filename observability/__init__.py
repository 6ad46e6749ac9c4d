"""Observability utilities for the interview session service."""
from .logger import log_event

__all__ = ["log_event"]
