"""Configuration loading for gojobs"""

from .loader import ConfigLoader

__all__ = ["ConfigLoader"]
