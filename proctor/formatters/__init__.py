"""Progress formatters used while bisecting."""

from __future__ import annotations

from .bisect_progress import BisectDebugFormatter, BisectProgressFormatter

__all__ = ["BisectDebugFormatter", "BisectProgressFormatter"]
