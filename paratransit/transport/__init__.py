"""Backend transport abstraction and its HTTP implementation."""

from .base import Transport

__all__ = ["Transport"]
