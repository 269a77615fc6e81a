"""JSON-backed settings for the TitleTool plugin."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from title_tool.anchors import DEFAULT_PROFILE, HostProfile
from title_tool.relocation import PlacementSettings

SETTINGS_FILE = "title_tool_settings.json"
DEBUG_ENV_VAR = "TITLE_TOOL_DEBUG"
DISABLE_ENV_VAR = "TITLE_TOOL_DISABLE"
PRIMARY_TOP_MARGIN_DEFAULT = 4
ALTERNATE_TOP_MARGIN_DEFAULT = 0
INFO_PADDING_DEFAULT = 10
MARGIN_MAX = 200
LOG_RETENTION_MAX = 20


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    token = value.strip().lower()
    if token in {"1", "true", "yes", "on"}:
        return True
    if token in {"0", "false", "no", "off"}:
        return False
    return None


def _coerce_int(raw: Any, fallback: int, *, minimum: int, maximum: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = fallback
    return max(minimum, min(value, maximum))


def _coerce_path(raw: Any, fallback: Tuple[int, ...]) -> Tuple[int, ...]:
    if not isinstance(raw, (list, tuple)):
        return fallback
    try:
        path = tuple(int(item) for item in raw)
    except (TypeError, ValueError):
        return fallback
    if any(index < 0 for index in path):
        return fallback
    return path


def _coerce_slot(raw: Any, fallback: Tuple[int, int]) -> Tuple[int, int]:
    path = _coerce_path(raw, fallback)
    if len(path) != 2:
        return fallback
    return path[0], path[1]


@dataclass
class RelocatorSettings:
    """Simple JSON-backed settings store."""

    plugin_dir: Path
    enabled: bool = True
    debug_logging: bool = False
    log_retention: int = 5
    primary_top_margin: int = PRIMARY_TOP_MARGIN_DEFAULT
    alternate_top_margin: int = ALTERNATE_TOP_MARGIN_DEFAULT
    info_padding: int = INFO_PADDING_DEFAULT
    primary_grid_path: Tuple[int, ...] = ()
    primary_grid_slot: Tuple[int, int] = (0, 4)
    profile_overrides: Dict[str, Optional[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.plugin_dir = Path(self.plugin_dir)
        self._path = self.plugin_dir / SETTINGS_FILE
        self._load()
        self._apply_env()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def profile(self) -> HostProfile:
        return DEFAULT_PROFILE.with_overrides(self.profile_overrides)

    # Persistence ---------------------------------------------------------

    def _load(self) -> None:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict):
            return
        self.enabled = bool(data.get("enabled", True))
        self.debug_logging = bool(data.get("debug_logging", False))
        self.log_retention = _coerce_int(data.get("log_retention"), 5, minimum=1, maximum=LOG_RETENTION_MAX)
        self.primary_top_margin = _coerce_int(
            data.get("primary_top_margin"), PRIMARY_TOP_MARGIN_DEFAULT, minimum=0, maximum=MARGIN_MAX
        )
        self.alternate_top_margin = _coerce_int(
            data.get("alternate_top_margin"), ALTERNATE_TOP_MARGIN_DEFAULT, minimum=0, maximum=MARGIN_MAX
        )
        self.info_padding = _coerce_int(data.get("info_padding"), INFO_PADDING_DEFAULT, minimum=0, maximum=MARGIN_MAX)
        self.primary_grid_path = _coerce_path(data.get("primary_grid_path"), ())
        self.primary_grid_slot = _coerce_slot(data.get("primary_grid_slot"), (0, 4))
        profile = data.get("profile")
        if isinstance(profile, dict):
            self.profile_overrides = {
                str(key): (str(value) if value is not None else None) for key, value in profile.items()
            }

    def _apply_env(self) -> None:
        debug = _env_flag(DEBUG_ENV_VAR)
        if debug is not None:
            self.debug_logging = debug
        disabled = _env_flag(DISABLE_ENV_VAR)
        if disabled:
            self.enabled = False

    def save(self) -> None:
        payload: Dict[str, Any] = {
            "enabled": bool(self.enabled),
            "debug_logging": bool(self.debug_logging),
            "log_retention": int(self.log_retention),
            "primary_top_margin": int(self.primary_top_margin),
            "alternate_top_margin": int(self.alternate_top_margin),
            "info_padding": int(self.info_padding),
            "primary_grid_path": list(self.primary_grid_path),
            "primary_grid_slot": list(self.primary_grid_slot),
            "profile": dict(self.profile_overrides),
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")

    def placement(self) -> PlacementSettings:
        return PlacementSettings(
            primary_top_margin=self.primary_top_margin,
            alternate_top_margin=self.alternate_top_margin,
            info_padding=self.info_padding,
            primary_grid_path=self.primary_grid_path,
            primary_grid_slot=self.primary_grid_slot,
        )
