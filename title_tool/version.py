"""Version metadata for the TitleTool plugin."""
from __future__ import annotations

__version__ = "0.2.0"
