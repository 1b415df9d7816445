"""Version information for proctor."""

from __future__ import annotations

VERSION = "1.4.0"
