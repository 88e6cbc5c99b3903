from __future__ import annotations

"""Transport implementations for navdata."""

from .base import Transport
from .inprocess import InProcessBus

__all__ = ["Transport", "InProcessBus"]
