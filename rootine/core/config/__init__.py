"""Configuration — the immutable Settings object and its loader."""

from rootine.core.config.loader import load_settings
from rootine.core.config.settings import Settings

__all__ = ["Settings", "load_settings"]
