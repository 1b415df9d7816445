"""Invocation layer for the proctor test-runner command line."""

from __future__ import annotations

from .version import VERSION

__all__ = ["VERSION"]
