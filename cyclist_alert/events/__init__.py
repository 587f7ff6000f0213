"""Fall event handling."""

from .manager import FallEventManager

__all__ = ["FallEventManager"]
