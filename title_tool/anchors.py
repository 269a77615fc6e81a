"""Structural anchors the relocation depends on and how to find them."""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from title_tool.errors import OptionalAnchorMissing, StructuralAnchorMissing, TargetNotYetPresent
from title_tool.host import HostAdapter, Node
from title_tool.tree_search import SearchQuery, first_match

_LOGGER = logging.getLogger("TitleTool")


@dataclass(frozen=True)
class HostProfile:
    """Capability table: every host-specific type identifier and object name lives here."""

    source_name: str = "TopDockTray"
    control_type: str = "QToolBar"
    control_name: Optional[str] = "TitleBar"
    title_anchor_name: str = "MainWindowTitleBar"
    alternate_anchor_name: str = "PART_MainMenuBar"
    info_control_type: Optional[str] = "SolutionInfoControl"
    info_text_name: Optional[str] = "TextBorder"
    grip_name: Optional[str] = None

    def with_overrides(self, overrides: Optional[Mapping[str, object]]) -> "HostProfile":
        if not overrides:
            return self
        known = {item.name for item in fields(self)}
        changes = {}
        for key, value in overrides.items():
            if key not in known:
                _LOGGER.debug("Ignoring unknown host profile key %r", key)
                continue
            if value is None:
                changes[key] = None
            elif isinstance(value, str):
                changes[key] = value.strip() or None
            else:
                _LOGGER.debug("Ignoring non-string host profile value %r=%r", key, value)
        for required in ("source_name", "control_type", "title_anchor_name", "alternate_anchor_name"):
            if required in changes and not changes[required]:
                _LOGGER.debug("Host profile key %r cannot be empty; keeping %r", required, getattr(self, required))
                changes.pop(required)
        return replace(self, **changes)


DEFAULT_PROFILE = HostProfile()


@dataclass(frozen=True)
class AnchorSet:
    source: Node
    control: Node
    title_anchor: Node
    alternate_anchor: Optional[Node] = None
    degraded: Optional[OptionalAnchorMissing] = None


class AnchorResolver:
    """Locates the four anchors in order, classifying each absence."""

    def __init__(self, host: HostAdapter, profile: HostProfile = DEFAULT_PROFILE) -> None:
        self._host = host
        self.profile = profile
        self.resolve_count = 0

    def resolve(self, root: Node) -> AnchorSet:
        self.resolve_count += 1
        profile = self.profile

        source = first_match(self._host, root, SearchQuery.by_name(profile.source_name))
        if source is None:
            raise StructuralAnchorMissing(
                "source",
                f"Could not find dock tray called '{profile.source_name}'",
            )

        control = first_match(
            self._host,
            source,
            SearchQuery(type_name=profile.control_type, name=profile.control_name),
        )
        if control is None:
            raise TargetNotYetPresent(
                "control",
                f"Toolbar {profile.control_name or profile.control_type!r} not found in '{profile.source_name}'",
                source=source,
            )

        title_anchor = first_match(self._host, root, SearchQuery.by_name(profile.title_anchor_name))
        if title_anchor is None:
            raise StructuralAnchorMissing(
                "title_anchor",
                f"Could not find main window titlebar called '{profile.title_anchor_name}'",
            )

        alternate_anchor = first_match(self._host, root, SearchQuery.by_name(profile.alternate_anchor_name))
        degraded = None
        if alternate_anchor is None:
            degraded = OptionalAnchorMissing(
                "alternate_anchor",
                f"FullScreen control {profile.alternate_anchor_name} not found: toolbar not supported in fullscreen",
            )

        return AnchorSet(
            source=source,
            control=control,
            title_anchor=title_anchor,
            alternate_anchor=alternate_anchor,
            degraded=degraded,
        )
